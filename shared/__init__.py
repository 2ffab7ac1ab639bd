# GHOST Platform - Shared Libraries
"""
Shared core libraries for GHOST BUYER.

Modules:
    ghost_core: Plan generation, execution history, pattern analysis
"""

__version__ = "1.0.0"
