"""
GHOST Core - Execution History
==============================

Bounded ring buffer of executed steps feeding the pattern analyzer.

Owned by whoever drives a plan and passed explicitly to the analyzer.
Failed attempts are recorded too: detectability depends on visible
transaction attempts, not on their outcomes.

Author: GHOST Development Team
Version: 1.0.0
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Deque, Dict, Iterator, List, Optional

from .constants import DEFAULT_HISTORY_CAPACITY
from .exceptions import InvalidConfigError

logger = logging.getLogger("GHOST_ExecutionHistory")


@dataclass(frozen=True)
class ExecutionRecord:
    """One attempted execution step."""

    amount: float
    delay_seconds: float
    success: bool = True
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    reference: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "amount": self.amount,
            "delay_seconds": self.delay_seconds,
            "success": self.success,
            "timestamp": self.timestamp.isoformat(),
            "reference": self.reference,
            "error": self.error,
        }


class ExecutionHistory:
    """
    Most recent execution records, oldest evicted first.

    Example:
        history = ExecutionHistory(capacity=100)
        history.record(amount=42.5, delay_seconds=95.0)
        analysis = PatternAnalyzer().analyze(history)
    """

    def __init__(self, capacity: int = DEFAULT_HISTORY_CAPACITY):
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            raise InvalidConfigError(f"History capacity must be a positive integer, got {capacity!r}")

        self._capacity = capacity
        self._records: Deque[ExecutionRecord] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def is_full(self) -> bool:
        return len(self._records) == self._capacity

    def append(self, record: ExecutionRecord) -> None:
        """Append a record, evicting the oldest when full."""
        if self.is_full:
            logger.debug(f"History full ({self._capacity}), evicting oldest record")
        self._records.append(record)

    def record(
        self,
        amount: float,
        delay_seconds: float,
        success: bool = True,
        reference: Optional[str] = None,
        error: Optional[str] = None,
    ) -> ExecutionRecord:
        """Create, append and return a record stamped with the current time."""
        entry = ExecutionRecord(
            amount=amount,
            delay_seconds=delay_seconds,
            success=success,
            reference=reference,
            error=error,
        )
        self.append(entry)
        return entry

    def records(self) -> List[ExecutionRecord]:
        """Snapshot of the records, oldest first."""
        return list(self._records)

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ExecutionRecord]:
        return iter(list(self._records))

    def __repr__(self) -> str:
        return f"<ExecutionHistory {len(self)}/{self._capacity}>"


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "ExecutionRecord",
    "ExecutionHistory",
]
