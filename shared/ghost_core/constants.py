"""
GHOST Core - System Constants
=============================

Centralized constants for the stealth execution planner.
All magic numbers of the chunking, timing and scoring algorithms
should be defined here.

Author: GHOST Development Team
Version: 1.0.0
"""

# =============================================================================
# SYSTEM IDENTIFICATION
# =============================================================================

VERSION = "1.0.0"
SYSTEM_NAME = "GHOST BUYER"

# Base asset every plan is denominated in
BASE_ASSET = "ADA"

# =============================================================================
# CHUNKING
# =============================================================================

# Hard cap on chunk generation iterations (guarantees termination)
MAX_CHUNK_ITERATIONS = 50

# Decimal places chunk amounts are rounded to
AMOUNT_DECIMALS = 2

# Aggressive mode: exponent bias towards the top of [min_chunk, max_chunk]
AGGRESSIVE_BIAS = 0.7

# Stealth mode: weights of the three blended uniform draws
STEALTH_BLEND_WEIGHTS = (0.5, 0.3, 0.2)

# Stealth mode: no chunk may exceed this fraction of the remaining amount
STEALTH_REMAINING_CAP = 0.3

# =============================================================================
# TIMING (milliseconds unless noted)
# =============================================================================

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60000

# Human-like variance patterns as (low, width): quick, normal, slow
HUMAN_VARIANCE_PATTERNS = (
    (0.5, 0.3),
    (0.8, 0.4),
    (1.2, 0.8),
)

# =============================================================================
# PATTERN ANALYSIS
# =============================================================================

# Minimum samples before dispersion is meaningful
MIN_ANALYSIS_SAMPLES = 2

# Timing is too regular when var(delays) < ratio * mean(delays)
DELAY_VARIANCE_RATIO = 0.1

# Sizing is too regular when var(amounts) < ratio * mean(amounts)
AMOUNT_VARIANCE_RATIO = 0.15

# =============================================================================
# STEALTH SCORE
# =============================================================================

MAX_STEALTH_SCORE = 100
MIN_STEALTH_SCORE = 0

# Score reported before enough executions exist to judge
DEFAULT_STEALTH_SCORE = 85
MIN_SCORE_SAMPLES = 5

RISK_PENALTIES = {
    "high": 40,
    "medium": 20,
    "low": 5,
}

# =============================================================================
# HISTORY
# =============================================================================

DEFAULT_HISTORY_CAPACITY = 100

# =============================================================================
# NETWORK TUNING
# =============================================================================

# Minimum delay under high congestion (seconds)
CONGESTED_MIN_DELAY_SEC = 60
CONGESTED_MAX_DELAY_FACTOR = 1.5

# Chunk ceiling factor under low liquidity
LOW_LIQUIDITY_CHUNK_FACTOR = 0.7

# =============================================================================
# VENUES
# =============================================================================

SUPPORTED_VENUES = ("minswap", "sundaeswap", "wingriders")
DEFAULT_VENUE = "minswap"


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "VERSION",
    "SYSTEM_NAME",
    "BASE_ASSET",
    "MAX_CHUNK_ITERATIONS",
    "AMOUNT_DECIMALS",
    "AGGRESSIVE_BIAS",
    "STEALTH_BLEND_WEIGHTS",
    "STEALTH_REMAINING_CAP",
    "MS_PER_SECOND",
    "MS_PER_MINUTE",
    "HUMAN_VARIANCE_PATTERNS",
    "MIN_ANALYSIS_SAMPLES",
    "DELAY_VARIANCE_RATIO",
    "AMOUNT_VARIANCE_RATIO",
    "MAX_STEALTH_SCORE",
    "MIN_STEALTH_SCORE",
    "DEFAULT_STEALTH_SCORE",
    "MIN_SCORE_SAMPLES",
    "RISK_PENALTIES",
    "DEFAULT_HISTORY_CAPACITY",
    "CONGESTED_MIN_DELAY_SEC",
    "CONGESTED_MAX_DELAY_FACTOR",
    "LOW_LIQUIDITY_CHUNK_FACTOR",
    "SUPPORTED_VENUES",
    "DEFAULT_VENUE",
]
