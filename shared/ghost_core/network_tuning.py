"""
GHOST Core - Network Condition Tuning
=====================================

Adjusts stealth settings to current network conditions and exposes
the static anti-MEV recommendations.

Adjustments:
    - High congestion: delay floor raised to 60s, ceiling x1.5
    - Low liquidity: chunk ceiling x0.7 (never below min_chunk)

Author: GHOST Development Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict

from .constants import (
    AMOUNT_DECIMALS,
    CONGESTED_MAX_DELAY_FACTOR,
    CONGESTED_MIN_DELAY_SEC,
    LOW_LIQUIDITY_CHUNK_FACTOR,
)
from .exceptions import InvalidConfigError
from .plan_generator import StealthSettings

logger = logging.getLogger("GHOST_NetworkTuning")

_LEVELS = ("low", "normal", "high")


@dataclass(frozen=True)
class NetworkConditions:
    """Observed network state."""

    congestion: str = "normal"
    liquidity: str = "normal"

    def __post_init__(self):
        for name in ("congestion", "liquidity"):
            value = getattr(self, name)
            if value not in _LEVELS:
                raise InvalidConfigError(
                    f"{name} must be one of {_LEVELS}, got {value!r}"
                )


@dataclass(frozen=True)
class AntiMEVStrategy:
    """Anti-MEV recommendations for Cardano DEX trading."""

    timing: Dict[str, bool] = field(default_factory=lambda: {
        "avoid_peak_hours": True,
        "randomize_block_targeting": True,
        "use_private_mempool": False,  # Not available on Cardano
    })
    routing: Dict[str, bool] = field(default_factory=lambda: {
        "split_across_dexs": True,
        "avoid_large_pools": False,
        "use_atomic_swaps": True,
    })
    obfuscation: Dict[str, bool] = field(default_factory=lambda: {
        "vary_gas_price": False,  # No gas auction on Cardano
        "use_proxy_contracts": False,
        "batch_with_other_txs": True,
    })

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timing": dict(self.timing),
            "routing": dict(self.routing),
            "obfuscation": dict(self.obfuscation),
        }


def optimize_for_network_conditions(
    settings: StealthSettings, conditions: NetworkConditions
) -> StealthSettings:
    """
    Return settings adjusted for network conditions.

    Args:
        settings: Base stealth settings
        conditions: Current network conditions

    Returns:
        New validated StealthSettings (input is never modified)
    """
    changes: Dict[str, Any] = {}

    if conditions.congestion == "high":
        min_delay = max(settings.min_delay_seconds, CONGESTED_MIN_DELAY_SEC)
        max_delay = max(settings.max_delay_seconds * CONGESTED_MAX_DELAY_FACTOR, min_delay)
        changes["min_delay_seconds"] = min_delay
        changes["max_delay_seconds"] = max_delay

    if conditions.liquidity == "low":
        ceiling = round(settings.max_chunk * LOW_LIQUIDITY_CHUNK_FACTOR, AMOUNT_DECIMALS)
        changes["max_chunk"] = max(settings.min_chunk, ceiling)

    if not changes:
        return settings

    logger.info(f"Settings tuned for {conditions}: {changes}")
    return settings.with_overrides(**changes)


def anti_mev_strategy() -> AntiMEVStrategy:
    """Static anti-MEV recommendations."""
    return AntiMEVStrategy()


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "NetworkConditions",
    "AntiMEVStrategy",
    "optimize_for_network_conditions",
    "anti_mev_strategy",
]
