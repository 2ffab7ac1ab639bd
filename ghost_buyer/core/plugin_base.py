"""
GHOST BUYER - Plugin Base Classes
=================================

Base classes for the runtime's pluggable components.

Plugin Categories:
- Execution: Drives execution plans (stealth executor)
- Venue: Trade and balance collaborators (DEX adapters)
- Monitoring: Observes execution outcomes (risk monitor)

Author: GHOST Development Team
Version: 1.0.0
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Any, Dict, List, Optional, Set

from .event_bus import Event, EventBus, EventType

logger = logging.getLogger("GHOST_Plugin")


class PluginCategory(Enum):
    """Plugin categories."""

    EXECUTION = "execution"
    VENUE = "venue"
    MONITORING = "monitoring"


class PluginState(Enum):
    """Plugin lifecycle state."""

    UNLOADED = auto()
    LOADED = auto()
    READY = auto()
    RUNNING = auto()
    STOPPING = auto()


@dataclass
class PluginConfig:
    """Plugin configuration."""

    name: str
    version: str = "1.0.0"
    category: PluginCategory = PluginCategory.EXECUTION
    enabled: bool = True
    settings: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PluginHealth:
    """Plugin health status."""

    healthy: bool
    message: str = ""
    last_check: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    metrics: Dict[str, Any] = field(default_factory=dict)


class Plugin(ABC):
    """
    Base class for all plugins.

    Lifecycle:
        1. load() - Load plugin resources
        2. initialize() - Attach to the event bus
        3. start() - Begin operation
        4. stop() - Clean shutdown
        5. unload() - Release resources

    Plugins work without an event bus too; events are then dropped.
    """

    def __init__(self, config: PluginConfig):
        self.config = config
        self.state = PluginState.UNLOADED
        self._event_bus: Optional[EventBus] = None
        self._subscriptions: Set[str] = set()
        self._logger = logging.getLogger(f"GHOST_{config.name}")
        self._started_at: Optional[datetime] = None
        self._stats = {
            "events_published": 0,
            "errors": 0,
        }

    @property
    def name(self) -> str:
        """Plugin name."""
        return self.config.name

    @property
    def category(self) -> PluginCategory:
        """Plugin category."""
        return self.config.category

    @property
    def is_running(self) -> bool:
        """Check if plugin is running."""
        return self.state == PluginState.RUNNING

    @property
    def event_bus(self) -> Optional[EventBus]:
        """Get event bus reference."""
        return self._event_bus

    async def load(self) -> bool:
        """Load plugin resources."""
        self.state = PluginState.LOADED
        self._logger.info(f"Plugin loaded: {self.name}")
        return True

    async def initialize(self, event_bus: EventBus) -> bool:
        """
        Attach plugin to the event bus.

        Args:
            event_bus: Event bus for communication

        Returns:
            True if initialized successfully
        """
        self._event_bus = event_bus
        await self._setup_subscriptions()

        self.state = PluginState.READY
        self._logger.info(f"Plugin initialized: {self.name}")
        return True

    async def _setup_subscriptions(self) -> None:
        """Setup event subscriptions. Override to consume events."""
        pass

    async def start(self) -> bool:
        """
        Start plugin operation.

        Returns:
            True if started successfully
        """
        if self.state not in {PluginState.LOADED, PluginState.READY}:
            self._logger.warning(f"Cannot start plugin in state: {self.state}")
            return False

        self.state = PluginState.RUNNING
        self._started_at = datetime.now(timezone.utc)
        self._logger.info(f"Plugin started: {self.name}")
        await self._publish(Event(
            event_type=EventType.PLUGIN_STARTED,
            data={"plugin": self.name},
            source=self.name,
        ))
        return True

    async def stop(self) -> bool:
        """
        Stop plugin operation.

        Returns:
            True if stopped successfully
        """
        self.state = PluginState.STOPPING
        await self._publish(Event(
            event_type=EventType.PLUGIN_STOPPED,
            data={"plugin": self.name},
            source=self.name,
        ))
        await self._cleanup_subscriptions()

        self.state = PluginState.LOADED
        self._logger.info(f"Plugin stopped: {self.name}")
        return True

    async def unload(self) -> bool:
        """Release plugin resources."""
        if self.state == PluginState.RUNNING:
            await self.stop()
        else:
            await self._cleanup_subscriptions()

        self._event_bus = None
        self.state = PluginState.UNLOADED
        self._logger.info(f"Plugin unloaded: {self.name}")
        return True

    async def _cleanup_subscriptions(self) -> None:
        """Remove all event subscriptions."""
        if self._event_bus:
            for sub_id in self._subscriptions:
                self._event_bus.unsubscribe(sub_id)
        self._subscriptions.clear()

    def _subscribe(
        self,
        event_types: Set[EventType],
        handler,
        filter_func=None,
    ) -> str:
        """
        Subscribe to events.

        Returns:
            Subscription ID
        """
        if not self._event_bus:
            raise RuntimeError("Event bus not initialized")

        sub_id = f"{self.name}_{len(self._subscriptions)}"
        self._event_bus.subscribe(sub_id, event_types, handler, filter_func)
        self._subscriptions.add(sub_id)
        return sub_id

    async def _publish(self, event: Event) -> None:
        """Publish an event if attached to a bus."""
        if not self._event_bus:
            return

        await self._event_bus.publish(event)
        self._stats["events_published"] += 1

    async def health_check(self) -> PluginHealth:
        """
        Check plugin health.

        Override to add custom health checks.
        """
        return PluginHealth(
            healthy=self.state in {PluginState.READY, PluginState.RUNNING},
            message=f"State: {self.state.name}",
            metrics={
                "events_published": self._stats["events_published"],
                "errors": self._stats["errors"],
                "uptime_seconds": (
                    (datetime.now(timezone.utc) - self._started_at).total_seconds()
                    if self._started_at else 0
                ),
            },
        )

    def get_stats(self) -> Dict[str, Any]:
        """Get plugin statistics."""
        return {
            "name": self.name,
            "category": self.category.value,
            "state": self.state.name,
            "enabled": self.config.enabled,
            "started_at": self._started_at.isoformat() if self._started_at else None,
            **self._stats,
        }

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name} state={self.state.name}>"


# =============================================================================
# SPECIALIZED BASE CLASSES
# =============================================================================


class ExecutionPlugin(Plugin):
    """Base class for execution plugins."""

    def __init__(self, config: PluginConfig):
        config.category = PluginCategory.EXECUTION
        super().__init__(config)

    @abstractmethod
    async def execute_order(self, order_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Execute a trade intent.

        Args:
            order_data: Trade intent details

        Returns:
            Execution result
        """
        pass


class VenuePlugin(Plugin):
    """
    Base class for trade venue adapters.

    A venue is both the balance collaborator and the trade collaborator
    the executor drives: get_balance() before planning, execute_swap()
    once per step.
    """

    def __init__(self, config: PluginConfig):
        config.category = PluginCategory.VENUE
        super().__init__(config)
        self._connected = False

    @property
    def is_connected(self) -> bool:
        """Check if connected to the venue."""
        return self._connected

    @abstractmethod
    async def connect(self) -> bool:
        """Connect to venue."""
        pass

    @abstractmethod
    async def disconnect(self) -> bool:
        """Disconnect from venue."""
        pass

    @abstractmethod
    async def get_balance(self, address: str) -> float:
        """Available base-asset balance for an address."""
        pass

    @abstractmethod
    async def execute_swap(
        self, token_in: str, token_out: str, amount: float, venue_id: str
    ) -> Any:
        """Execute one swap; raise TradeExecutionError on failure."""
        pass

    @abstractmethod
    def list_venues(self) -> List[str]:
        """Venue identifiers this adapter can route to."""
        pass


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "PluginCategory",
    "PluginState",
    "PluginConfig",
    "PluginHealth",
    "Plugin",
    "ExecutionPlugin",
    "VenuePlugin",
]
