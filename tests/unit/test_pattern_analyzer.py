"""
Tests for Pattern Analyzer
==========================

Tests detection risk classification and stealth scoring.
"""

import pytest

from shared.ghost_core.execution_history import ExecutionHistory
from shared.ghost_core.pattern_analyzer import (
    SIZING_RECOMMENDATION,
    TIMING_RECOMMENDATION,
    PatternAnalysis,
    PatternAnalyzer,
    RiskLevel,
)

VARIED_DELAYS = [10, 200, 50, 300, 120]
REGULAR_DELAYS = [60, 61, 60, 59, 60]
VARIED_AMOUNTS = [10, 50, 90, 30, 70]
REGULAR_AMOUNTS = [50, 50, 50, 50, 50]


@pytest.fixture
def analyzer():
    """Create analyzer."""
    return PatternAnalyzer()


class TestTrivialHistory:
    """Tests for histories too short to analyze."""

    def test_empty_history(self, analyzer):
        """Empty history is low risk with no recommendations."""
        analysis = analyzer.analyze([])
        assert analysis.risk_level == RiskLevel.LOW
        assert analysis.recommendations == ()
        assert analysis.sample_count == 0

    def test_single_record(self, analyzer, make_records):
        """One record is still trivial."""
        analysis = analyzer.analyze(make_records([50], [60]))
        assert analysis == PatternAnalysis(sample_count=1)


class TestRiskClassification:
    """Tests for variance-based risk checks."""

    def test_regular_timing_is_medium(self, analyzer, make_records):
        """Uniform delays with varied sizes flag timing."""
        analysis = analyzer.analyze(make_records(VARIED_AMOUNTS, REGULAR_DELAYS))
        assert analysis.risk_level == RiskLevel.MEDIUM
        assert analysis.recommendations == (TIMING_RECOMMENDATION,)

    def test_regular_sizes_is_high(self, analyzer, make_records):
        """Uniform sizes flag high risk."""
        analysis = analyzer.analyze(make_records(REGULAR_AMOUNTS, VARIED_DELAYS))
        assert analysis.risk_level == RiskLevel.HIGH
        assert analysis.recommendations == (SIZING_RECOMMENDATION,)

    def test_both_regular_high_wins(self, analyzer, make_records):
        """Sizing check overrides the timing check, both recommended."""
        analysis = analyzer.analyze(make_records(REGULAR_AMOUNTS, REGULAR_DELAYS))
        assert analysis.risk_level == RiskLevel.HIGH
        assert analysis.recommendations == (TIMING_RECOMMENDATION, SIZING_RECOMMENDATION)

    def test_varied_history_is_low(self, analyzer, make_records):
        """Irregular timing and sizes are low risk."""
        analysis = analyzer.analyze(make_records(VARIED_AMOUNTS, VARIED_DELAYS))
        assert analysis.risk_level == RiskLevel.LOW
        assert analysis.recommendations == ()

    def test_uses_population_variance(self, analyzer, make_records):
        """Variance divides by n, not n - 1."""
        analysis = analyzer.analyze(make_records([10, 30], [0, 100]))
        assert analysis.amount_variance == pytest.approx(100.0)
        assert analysis.delay_variance == pytest.approx(2500.0)

    def test_means_rounded(self, analyzer, make_records):
        """Mean delay rounded to whole seconds, mean amount to cents."""
        analysis = analyzer.analyze(make_records([10.004, 20.0, 30.0], [30, 60, 61]))
        assert analysis.mean_delay_seconds == 50.0
        assert analysis.mean_amount == 20.0
        assert analysis.sample_count == 3

    def test_accepts_history_buffer(self, analyzer):
        """Analyzer reads an ExecutionHistory directly."""
        history = ExecutionHistory(capacity=10)
        for amount, delay in zip(REGULAR_AMOUNTS, VARIED_DELAYS):
            history.record(amount=amount, delay_seconds=delay)

        assert analyzer.analyze(history).risk_level == RiskLevel.HIGH

    def test_to_dict(self, analyzer, make_records):
        """Serialized analysis carries risk and recommendations."""
        data = analyzer.analyze(make_records(REGULAR_AMOUNTS, VARIED_DELAYS)).to_dict()
        assert data["risk"] == "high"
        assert data["recommendations"] == [SIZING_RECOMMENDATION]
        assert data["total_executions"] == 5
        assert data["avg_amount"] == 50.0


class TestStealthScore:
    """Tests for stealth scoring."""

    def test_default_score_below_five_records(self, analyzer, make_records):
        """Fewer than 5 records short-circuit to 85."""
        assert analyzer.stealth_score([]) == 85
        records = make_records(REGULAR_AMOUNTS[:4], REGULAR_DELAYS[:4])
        assert analyzer.stealth_score(records) == 85

    def test_score_per_risk_level(self, analyzer, make_records):
        """Score is 100 minus the risk penalty."""
        assert analyzer.stealth_score(make_records(VARIED_AMOUNTS, VARIED_DELAYS)) == 95
        assert analyzer.stealth_score(make_records(VARIED_AMOUNTS, REGULAR_DELAYS)) == 80
        assert analyzer.stealth_score(make_records(REGULAR_AMOUNTS, VARIED_DELAYS)) == 60

    def test_score_monotonic_in_risk(self, analyzer, make_records):
        """Higher risk never scores higher."""
        low = analyzer.stealth_score(make_records(VARIED_AMOUNTS, VARIED_DELAYS))
        medium = analyzer.stealth_score(make_records(VARIED_AMOUNTS, REGULAR_DELAYS))
        high = analyzer.stealth_score(make_records(REGULAR_AMOUNTS, REGULAR_DELAYS))
        assert high < medium < low

    def test_score_is_bounded_int(self, analyzer, make_records):
        """Score is an integer in [0, 100]."""
        score = analyzer.stealth_score(make_records(REGULAR_AMOUNTS, REGULAR_DELAYS))
        assert isinstance(score, int)
        assert 0 <= score <= 100
