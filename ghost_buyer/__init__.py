# GHOST BUYER - Stealth Execution Runtime
"""
GHOST BUYER: stealth chunked buying for Cardano DEXs.

Core Components:
    - Event Bus: Async pub/sub communication
    - Plugin System: Executor and venue plugins
    - Config Manager: YAML/JSON configuration with env overrides

Planning and analysis live in shared.ghost_core.

Example:
    from ghost_buyer import StealthExecutor, PaperDex

    venue = PaperDex()
    await venue.connect()
    executor = StealthExecutor(venue)
    report = await executor.execute_order({"token_out": "SNEK", "amount": 500})

Author: GHOST Development Team
Version: 1.0.0
"""

from ghost_buyer.core.event_bus import EventBus, Event, EventType
from ghost_buyer.core.plugin_base import (
    Plugin,
    PluginConfig,
    PluginState,
    PluginCategory,
    ExecutionPlugin,
    VenuePlugin,
)
from ghost_buyer.core.config_manager import ConfigManager
from ghost_buyer.plugins.execution.stealth_executor import StealthExecutor, StealthExecutorConfig
from ghost_buyer.plugins.venues.paper_dex import PaperDex, PaperDexConfig

__version__ = "1.0.0"
__author__ = "GHOST Development Team"

__all__ = [
    # Core
    "EventBus",
    "Event",
    "EventType",
    "Plugin",
    "PluginConfig",
    "PluginState",
    "PluginCategory",
    "ConfigManager",
    # Base plugins
    "ExecutionPlugin",
    "VenuePlugin",
    # Plugins
    "StealthExecutor",
    "StealthExecutorConfig",
    "PaperDex",
    "PaperDexConfig",
]
