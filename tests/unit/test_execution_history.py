"""
Tests for Execution History
===========================

Tests the bounded ring buffer feeding the pattern analyzer.
"""

import pytest

from shared.ghost_core.exceptions import InvalidConfigError
from shared.ghost_core.execution_history import ExecutionHistory, ExecutionRecord


class TestExecutionHistory:
    """Tests for ExecutionHistory."""

    def test_default_capacity(self):
        """Default capacity is 100."""
        assert ExecutionHistory().capacity == 100

    def test_evicts_oldest(self):
        """Appending 105 records keeps the last 100 in order."""
        history = ExecutionHistory()
        for i in range(105):
            history.record(amount=float(i), delay_seconds=30.0)

        assert len(history) == 100
        assert history.is_full
        assert [r.amount for r in history] == [float(i) for i in range(5, 105)]

    def test_record_returns_entry(self):
        """record() stamps and returns the appended entry."""
        history = ExecutionHistory(capacity=3)
        entry = history.record(amount=12.5, delay_seconds=45.0, success=False, error="slippage")

        assert isinstance(entry, ExecutionRecord)
        assert history.records() == [entry]
        assert entry.success is False
        assert entry.error == "slippage"
        assert entry.timestamp.tzinfo is not None

    def test_iteration_is_snapshot(self):
        """Mutating during iteration does not break the iterator."""
        history = ExecutionHistory(capacity=5)
        history.record(amount=1.0, delay_seconds=0.0)
        history.record(amount=2.0, delay_seconds=10.0)

        seen = []
        for record in history:
            seen.append(record.amount)
            history.record(amount=99.0, delay_seconds=1.0)

        assert seen == [1.0, 2.0]
        assert len(history) == 4

    def test_clear(self):
        """Clear empties the buffer."""
        history = ExecutionHistory(capacity=2)
        history.record(amount=1.0, delay_seconds=0.0)
        history.clear()
        assert len(history) == 0
        assert not history.is_full

    @pytest.mark.parametrize("capacity", [0, -1, 2.5, True, "10"])
    def test_invalid_capacity(self, capacity):
        """Capacity must be a positive integer."""
        with pytest.raises(InvalidConfigError):
            ExecutionHistory(capacity=capacity)

    def test_record_to_dict(self):
        """Record serializes with ISO timestamp."""
        data = ExecutionRecord(amount=10.0, delay_seconds=5.0, reference="ab" * 32).to_dict()
        assert data["amount"] == 10.0
        assert data["reference"] == "ab" * 32
        assert "T" in data["timestamp"]
