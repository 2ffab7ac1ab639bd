"""
GHOST Core - Pattern Analyzer & Stealth Scorer
==============================================

Scores how statistically regular a history of executions looks.

Checks (the worse one wins):
    var(delays)  < 0.1  * mean(delays)   -> medium (timing too regular)
    var(amounts) < 0.15 * mean(amounts)  -> high   (sizes too regular)

Stealth score:
    100 - penalty(risk), penalty = {high: 40, medium: 20, low: 5}
    85 while fewer than 5 executions exist

Author: GHOST Development Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Tuple

import numpy as np

from .constants import (
    AMOUNT_DECIMALS,
    AMOUNT_VARIANCE_RATIO,
    DEFAULT_STEALTH_SCORE,
    DELAY_VARIANCE_RATIO,
    MAX_STEALTH_SCORE,
    MIN_ANALYSIS_SAMPLES,
    MIN_SCORE_SAMPLES,
    MIN_STEALTH_SCORE,
    RISK_PENALTIES,
)
from .execution_history import ExecutionRecord

logger = logging.getLogger("GHOST_PatternAnalyzer")

TIMING_RECOMMENDATION = "Increase timing variance to avoid detection"
SIZING_RECOMMENDATION = "Vary chunk sizes more to appear natural"


class RiskLevel(str, Enum):
    """Detection risk classification."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class PatternAnalysis:
    """Derived, read-only analysis of an execution history."""

    risk_level: RiskLevel = RiskLevel.LOW
    recommendations: Tuple[str, ...] = field(default_factory=tuple)
    mean_delay_seconds: float = 0.0
    mean_amount: float = 0.0
    sample_count: int = 0
    delay_variance: float = 0.0
    amount_variance: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "risk": self.risk_level.value,
            "recommendations": list(self.recommendations),
            "avg_delay_seconds": self.mean_delay_seconds,
            "avg_amount": self.mean_amount,
            "total_executions": self.sample_count,
            "delay_variance": self.delay_variance,
            "amount_variance": self.amount_variance,
        }


class PatternAnalyzer:
    """
    Execution pattern analyzer.

    Example:
        analyzer = PatternAnalyzer()
        analysis = analyzer.analyze(history)
        if analysis.risk_level == RiskLevel.HIGH:
            print(analysis.recommendations)
        score = analyzer.stealth_score(history)
    """

    def analyze(self, history: Iterable[ExecutionRecord]) -> PatternAnalysis:
        """
        Analyze an execution history for detectable regularity.

        Args:
            history: Execution records, oldest first

        Returns:
            PatternAnalysis (trivial low-risk result below 2 records)
        """
        records = list(history)

        if len(records) < MIN_ANALYSIS_SAMPLES:
            return PatternAnalysis(sample_count=len(records))

        delays = np.array([r.delay_seconds for r in records], dtype=float)
        amounts = np.array([r.amount for r in records], dtype=float)

        mean_delay = float(np.mean(delays))
        delay_var = float(np.var(delays))
        mean_amount = float(np.mean(amounts))
        amount_var = float(np.var(amounts))

        risk = RiskLevel.LOW
        recommendations = []

        if delay_var < mean_delay * DELAY_VARIANCE_RATIO:
            risk = RiskLevel.MEDIUM
            recommendations.append(TIMING_RECOMMENDATION)

        if amount_var < mean_amount * AMOUNT_VARIANCE_RATIO:
            risk = RiskLevel.HIGH
            recommendations.append(SIZING_RECOMMENDATION)

        if risk == RiskLevel.HIGH:
            logger.warning(
                f"High detection risk over {len(records)} executions: "
                f"amount var={amount_var:.2f}, mean={mean_amount:.2f}"
            )

        return PatternAnalysis(
            risk_level=risk,
            recommendations=tuple(recommendations),
            mean_delay_seconds=float(round(mean_delay)),
            mean_amount=round(mean_amount, AMOUNT_DECIMALS),
            sample_count=len(records),
            delay_variance=delay_var,
            amount_variance=amount_var,
        )

    def stealth_score(self, history: Iterable[ExecutionRecord]) -> int:
        """
        Stealth score from 0-100 (higher is stealthier).

        Fewer than 5 records short-circuit to the default score
        without running the analysis.
        """
        records = list(history)

        if len(records) < MIN_SCORE_SAMPLES:
            return DEFAULT_STEALTH_SCORE

        analysis = self.analyze(records)
        score = MAX_STEALTH_SCORE - RISK_PENALTIES[analysis.risk_level.value]
        return int(max(MIN_STEALTH_SCORE, min(MAX_STEALTH_SCORE, score)))


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "TIMING_RECOMMENDATION",
    "SIZING_RECOMMENDATION",
    "RiskLevel",
    "PatternAnalysis",
    "PatternAnalyzer",
]
