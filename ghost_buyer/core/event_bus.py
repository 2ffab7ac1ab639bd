"""
GHOST BUYER - Event Bus
=======================

Async pub/sub channel between the executor, venues and observers
(UI bridges, loggers, alerting).

Features:
- Subscription by event type with optional filter
- Handler priority ordering
- Dead letter list for failed deliveries
- Bounded event history

Author: GHOST Development Team
Version: 1.0.0
"""

import logging
from collections import defaultdict, deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Any, Callable, Coroutine, Deque, Dict, List, Optional, Set
from uuid import uuid4

logger = logging.getLogger("GHOST_EventBus")


class EventType(Enum):
    """Event types emitted while planning and executing."""

    # Planning
    PLAN_GENERATED = auto()

    # Execution lifecycle
    EXECUTION_STARTED = auto()
    EXECUTION_COMPLETED = auto()
    EXECUTION_CANCELLED = auto()

    # Per-step
    STEP_SUBMITTED = auto()
    STEP_FILLED = auto()
    STEP_FAILED = auto()

    # Analysis
    RISK_ALERT = auto()

    # Plugins
    PLUGIN_STARTED = auto()
    PLUGIN_STOPPED = auto()


@dataclass
class Event:
    """Event message for the event bus."""

    event_type: EventType
    data: Dict[str, Any]
    source: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_id: str = field(default_factory=lambda: f"evt_{uuid4().hex[:12]}")
    correlation_id: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "event_type": self.event_type.name,
            "data": self.data,
            "source": self.source,
            "timestamp": self.timestamp.isoformat(),
            "event_id": self.event_id,
            "correlation_id": self.correlation_id,
        }


EventHandler = Callable[[Event], Coroutine[Any, Any, None]]


@dataclass
class Subscription:
    """Event subscription."""

    handler: EventHandler
    subscriber_id: str
    event_types: Set[EventType]
    filter_func: Optional[Callable[[Event], bool]] = None
    priority: int = 0


class EventBus:
    """
    Async event bus.

    Handlers are awaited in priority order (lower first) inside
    publish(), so events from one execution arrive in emission order.

    Example:
        bus = EventBus()

        async def on_fill(event: Event):
            print(f"Step filled: {event.data}")

        bus.subscribe("ui", {EventType.STEP_FILLED}, on_fill)
        await bus.publish(Event(
            event_type=EventType.STEP_FILLED,
            data={"order": 1, "amount": 27.4},
            source="stealth_executor",
        ))
    """

    def __init__(self, history_size: int = 1000):
        self._subscriptions: Dict[str, Subscription] = {}
        self._type_index: Dict[EventType, Set[str]] = defaultdict(set)
        self._dead_letter: List[Event] = []
        self._history: Deque[Event] = deque(maxlen=history_size)
        self._stats = {
            "events_published": 0,
            "events_delivered": 0,
            "events_failed": 0,
        }

        logger.info("EventBus initialized")

    def subscribe(
        self,
        subscriber_id: str,
        event_types: Set[EventType],
        handler: EventHandler,
        filter_func: Optional[Callable[[Event], bool]] = None,
        priority: int = 0,
    ) -> None:
        """
        Subscribe to events.

        Args:
            subscriber_id: Unique subscriber identifier
            event_types: Event types to receive
            handler: Async handler
            filter_func: Optional predicate applied before delivery
            priority: Lower values are delivered first
        """
        if subscriber_id in self._subscriptions:
            self.unsubscribe(subscriber_id)

        self._subscriptions[subscriber_id] = Subscription(
            handler=handler,
            subscriber_id=subscriber_id,
            event_types=set(event_types),
            filter_func=filter_func,
            priority=priority,
        )
        for event_type in event_types:
            self._type_index[event_type].add(subscriber_id)

        logger.debug(f"Subscription added: {subscriber_id} -> {[e.name for e in event_types]}")

    def unsubscribe(self, subscriber_id: str) -> bool:
        """Remove a subscription."""
        subscription = self._subscriptions.pop(subscriber_id, None)
        if subscription is None:
            return False

        for event_type in subscription.event_types:
            self._type_index[event_type].discard(subscriber_id)

        logger.debug(f"Subscription removed: {subscriber_id}")
        return True

    async def publish(self, event: Event) -> int:
        """
        Publish an event and deliver it to matching subscribers.

        Returns:
            Number of handlers that processed the event
        """
        self._history.append(event)
        self._stats["events_published"] += 1

        subscribers = sorted(
            (self._subscriptions[sid] for sid in self._type_index.get(event.event_type, set())
             if sid in self._subscriptions),
            key=lambda sub: sub.priority,
        )

        delivered = 0
        for subscription in subscribers:
            if subscription.filter_func and not subscription.filter_func(event):
                continue

            try:
                await subscription.handler(event)
                delivered += 1
                self._stats["events_delivered"] += 1
            except Exception as e:
                logger.error(f"Handler error for {subscription.subscriber_id}: {e}")
                self._dead_letter.append(event)
                self._stats["events_failed"] += 1

        return delivered

    def get_stats(self) -> Dict[str, Any]:
        """Get event bus statistics."""
        return {
            **self._stats,
            "subscribers": len(self._subscriptions),
            "dead_letter_count": len(self._dead_letter),
            "history_size": len(self._history),
        }

    def get_history(self, event_type: Optional[EventType] = None, limit: int = 100) -> List[Event]:
        """Get event history, optionally filtered by type."""
        events = list(self._history)

        if event_type:
            events = [e for e in events if e.event_type == event_type]

        return events[-limit:]

    def clear_dead_letter(self) -> List[Event]:
        """Clear and return dead letter list."""
        events = self._dead_letter.copy()
        self._dead_letter.clear()
        return events


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "EventType",
    "Event",
    "EventHandler",
    "Subscription",
    "EventBus",
]
