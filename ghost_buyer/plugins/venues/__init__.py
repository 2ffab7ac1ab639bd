# GHOST BUYER Venue Plugins
"""
Trade venue adapters (balance and swap collaborators).

Available Plugins:
    - Paper DEX (simulated Minswap / SundaeSwap / WingRiders)
"""

from .paper_dex import PaperDex, PaperDexConfig, SwapResult

__all__ = [
    "PaperDex",
    "PaperDexConfig",
    "SwapResult",
]
