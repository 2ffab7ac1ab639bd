"""
GHOST BUYER - Paper DEX Venue
=============================

Simulated Cardano DEX venue for development and dry runs.

Features:
- Simulated ADA wallet balance, debited on fills
- Randomized fills within a slippage band
- Configurable failure rate
- Fabricated 64-hex transaction references

Not a liquidity model: prices are static, fills are uniform noise.

Author: GHOST Development Team
Version: 1.0.0
"""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ghost_buyer.core.plugin_base import PluginCategory, PluginConfig, VenuePlugin
from shared.ghost_core.constants import BASE_ASSET, SUPPORTED_VENUES
from shared.ghost_core.exceptions import TradeExecutionError

logger = logging.getLogger("GHOST_PaperDex")


@dataclass
class PaperDexConfig:
    """Paper venue configuration."""

    initial_balance: float = 10000.0
    failure_probability: float = 0.05
    max_slippage: float = 0.02
    latency_sec: float = 0.0
    venues: Tuple[str, ...] = SUPPORTED_VENUES
    # Token prices in ADA
    prices: Dict[str, float] = field(default_factory=lambda: {
        "HOSKY": 0.0001,
        "SNEK": 0.0015,
        "WRT": 0.25,
        "SUNDAE": 0.02,
        "MIN": 0.08,
        "AGIX": 0.35,
    })
    default_price: float = 0.001


@dataclass
class SwapResult:
    """Outcome of one settled swap."""

    success: bool
    amount_in: float
    received_amount: float
    slippage: float
    reference: str
    venue_id: str
    token_in: str = BASE_ASSET
    token_out: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "amount_in": self.amount_in,
            "received_amount": self.received_amount,
            "slippage": self.slippage,
            "reference": self.reference,
            "venue_id": self.venue_id,
            "token_in": self.token_in,
            "token_out": self.token_out,
            "timestamp": self.timestamp.isoformat(),
        }


class PaperDex(VenuePlugin):
    """
    Paper DEX venue.

    Simulates Minswap, SundaeSwap and WingRiders swaps against a
    single simulated wallet. Pass a seeded rng for reproducible fills.
    """

    def __init__(self, config: Optional[PaperDexConfig] = None, rng: Optional[random.Random] = None):
        config = config or PaperDexConfig()
        super().__init__(PluginConfig(
            name="paper_dex",
            version="1.0.0",
            category=PluginCategory.VENUE,
            settings={
                "initial_balance": config.initial_balance,
                "failure_probability": config.failure_probability,
                "max_slippage": config.max_slippage,
                "venues": list(config.venues),
            },
        ))

        self.paper_config = config
        self._rng = rng or random.Random()
        self._balance = config.initial_balance
        self._swaps: List[SwapResult] = []
        self._swaps_failed = 0

    async def connect(self) -> bool:
        """Connect to paper venue (always succeeds)."""
        self._connected = True
        self._logger.info(f"Paper DEX connected. Balance: {self._balance:.2f} {BASE_ASSET}")
        return True

    async def disconnect(self) -> bool:
        """Disconnect from paper venue."""
        self._connected = False
        return True

    def list_venues(self) -> List[str]:
        return list(self.paper_config.venues)

    async def get_balance(self, address: str) -> float:
        """Simulated balance (one wallet regardless of address)."""
        return self._balance

    def get_price(self, token: str) -> float:
        """Static token price in ADA."""
        return self.paper_config.prices.get(token.upper(), self.paper_config.default_price)

    async def execute_swap(
        self, token_in: str, token_out: str, amount: float, venue_id: str
    ) -> SwapResult:
        """
        Execute a simulated swap.

        Raises:
            TradeExecutionError: not connected, unknown venue, bad amount,
                insufficient balance or a simulated venue failure
        """
        venue = venue_id.lower()

        if not self._connected:
            raise TradeExecutionError("Paper DEX not connected", venue_id=venue, amount=amount)
        if venue not in self.paper_config.venues:
            raise TradeExecutionError(f"Unsupported DEX: {venue_id}", venue_id=venue, amount=amount)
        if amount <= 0:
            raise TradeExecutionError(f"Swap amount must be > 0, got {amount}", venue_id=venue, amount=amount)
        if amount > self._balance:
            raise TradeExecutionError(
                f"Insufficient balance: {self._balance:.2f} < {amount:.2f}",
                venue_id=venue,
                amount=amount,
            )

        if self.paper_config.latency_sec > 0:
            await asyncio.sleep(self.paper_config.latency_sec)

        if self._rng.random() < self.paper_config.failure_probability:
            self._swaps_failed += 1
            raise TradeExecutionError(
                f"{venue} simulation: transaction failed "
                f"(slippage exceeded or insufficient liquidity)",
                venue_id=venue,
                amount=amount,
            )

        expected = amount / self.get_price(token_out)
        spread = self.paper_config.max_slippage
        fill_factor = 1 - spread + self._rng.random() * 2 * spread
        received = expected * fill_factor
        slippage = abs(expected - received) / expected

        self._balance -= amount

        result = SwapResult(
            success=True,
            amount_in=amount,
            received_amount=received,
            slippage=slippage,
            reference=self._generate_reference(),
            venue_id=venue,
            token_in=token_in,
            token_out=token_out,
        )
        self._swaps.append(result)

        self._logger.info(
            f"Paper swap on {venue}: {amount:.2f} {token_in} -> "
            f"{received:.6f} {token_out} (slippage {slippage * 100:.2f}%)"
        )
        return result

    def _generate_reference(self) -> str:
        """Transaction-hash-like 64 hex characters."""
        return "".join(f"{int(self._rng.random() * 16):x}" for _ in range(64))

    def get_swap_history(self) -> List[SwapResult]:
        return self._swaps.copy()

    def reset(self) -> None:
        """Reset paper wallet."""
        self._balance = self.paper_config.initial_balance
        self._swaps.clear()
        self._swaps_failed = 0
        self._logger.info("Paper DEX reset")

    def get_stats(self) -> Dict[str, Any]:
        """Get venue statistics."""
        return {
            **super().get_stats(),
            "balance": self._balance,
            "swaps_filled": len(self._swaps),
            "swaps_failed": self._swaps_failed,
        }


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "PaperDexConfig",
    "SwapResult",
    "PaperDex",
]
