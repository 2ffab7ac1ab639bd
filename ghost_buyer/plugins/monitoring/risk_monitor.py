"""
GHOST BUYER - Risk Monitor Plugin
=================================

Watches stealth executions for failed steps and pattern risk alerts.

Features:
- Subscribes to step failures, fills and risk alerts
- Groups failures by execution id
- Consecutive failure tracking (health degrades past a threshold)
- Bounded alert history

Author: GHOST Development Team
Version: 1.0.0
"""

import logging
from collections import defaultdict, deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional

from ghost_buyer.core.event_bus import Event, EventType
from ghost_buyer.core.plugin_base import Plugin, PluginCategory, PluginConfig, PluginHealth
from shared.ghost_core.exceptions import InvalidConfigError

logger = logging.getLogger("GHOST_RiskMonitor")


@dataclass
class MonitorAlert:
    """Alert raised by the monitor."""

    level: str
    message: str
    source: str
    execution_id: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "message": self.message,
            "source": self.source,
            "execution_id": self.execution_id,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class RiskMonitorConfig:
    """Risk monitor configuration."""

    max_consecutive_failures: int = 3
    max_alerts: int = 100
    log_alerts: bool = True

    def __post_init__(self):
        for name in ("max_consecutive_failures", "max_alerts"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise InvalidConfigError(f"{name} must be a positive integer, got {value!r}")


class RiskMonitor(Plugin):
    """
    Risk Monitor Plugin.

    Observes executor events on the bus:
    - STEP_FAILED raises a warning, escalated to error once failures
      run past max_consecutive_failures in a row
    - STEP_FILLED resets the consecutive failure count
    - RISK_ALERT raises a warning carrying the analyzer's recommendations

    The monitor never touches the executor; it only reports.
    """

    def __init__(self, config: Optional[RiskMonitorConfig] = None):
        self.monitor_config = config or RiskMonitorConfig()
        super().__init__(PluginConfig(
            name="risk_monitor",
            version="1.0.0",
            category=PluginCategory.MONITORING,
            settings=self.monitor_config.__dict__.copy(),
        ))

        self._alerts: Deque[MonitorAlert] = deque(maxlen=self.monitor_config.max_alerts)
        self._failures_by_execution: Dict[str, int] = defaultdict(int)
        self._consecutive_failures = 0
        self._step_failures = 0
        self._risk_alerts = 0
        self._stats["events_processed"] = 0

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    async def _setup_subscriptions(self) -> None:
        """Subscribe to executor outcome events."""
        self._subscribe(
            {EventType.STEP_FAILED, EventType.STEP_FILLED, EventType.RISK_ALERT},
            self._handle_event,
        )

    async def _handle_event(self, event: Event) -> None:
        self._stats["events_processed"] += 1

        if event.event_type == EventType.STEP_FILLED:
            self._consecutive_failures = 0
        elif event.event_type == EventType.STEP_FAILED:
            self._on_step_failed(event)
        elif event.event_type == EventType.RISK_ALERT:
            self._on_risk_alert(event)

    def _on_step_failed(self, event: Event) -> None:
        self._step_failures += 1
        self._consecutive_failures += 1
        if event.correlation_id:
            self._failures_by_execution[event.correlation_id] += 1

        level = "WARNING"
        if self._consecutive_failures >= self.monitor_config.max_consecutive_failures:
            level = "ERROR"

        self._raise_alert(
            level,
            f"Step {event.data.get('order')} failed: {event.data.get('error')} "
            f"({self._consecutive_failures} in a row)",
            event,
        )

    def _on_risk_alert(self, event: Event) -> None:
        self._risk_alerts += 1
        recommendations = event.data.get("recommendations") or []
        message = f"Pattern risk {event.data.get('risk', 'unknown')}"
        if recommendations:
            message += ": " + "; ".join(recommendations)
        self._raise_alert("WARNING", message, event)

    def _raise_alert(self, level: str, message: str, event: Event) -> None:
        alert = MonitorAlert(
            level=level,
            message=message,
            source=event.source,
            execution_id=event.correlation_id,
            context=dict(event.data),
        )
        self._alerts.append(alert)

        if self.monitor_config.log_alerts:
            log_func = self._logger.error if level == "ERROR" else self._logger.warning
            log_func(f"[{alert.source}] {alert.message}")

    def get_alerts(self, execution_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """Alert history, optionally limited to one execution."""
        return [
            a.to_dict()
            for a in self._alerts
            if execution_id is None or a.execution_id == execution_id
        ]

    def failures_for(self, execution_id: str) -> int:
        """Failed steps seen for one execution."""
        return self._failures_by_execution.get(execution_id, 0)

    async def health_check(self) -> PluginHealth:
        """Unhealthy while consecutive failures sit at or above the threshold."""
        health = await super().health_check()
        threshold = self.monitor_config.max_consecutive_failures

        if self._consecutive_failures >= threshold:
            health.healthy = False
            health.message = f"{self._consecutive_failures} consecutive step failures"

        health.metrics.update({
            "step_failures": self._step_failures,
            "risk_alerts": self._risk_alerts,
            "consecutive_failures": self._consecutive_failures,
        })
        return health

    def get_stats(self) -> Dict[str, Any]:
        """Get monitor statistics."""
        return {
            **super().get_stats(),
            "step_failures": self._step_failures,
            "risk_alerts": self._risk_alerts,
            "consecutive_failures": self._consecutive_failures,
            "executions_with_failures": len(self._failures_by_execution),
            "alerts": len(self._alerts),
        }


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "MonitorAlert",
    "RiskMonitorConfig",
    "RiskMonitor",
]
