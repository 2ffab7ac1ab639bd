# GHOST BUYER Core Infrastructure
"""
Core runtime components for GHOST BUYER.

Modules:
    event_bus: Async event-driven communication
    plugin_base: Base classes for all plugins
    config_manager: Configuration management
"""

from .event_bus import EventBus, Event, EventType
from .plugin_base import Plugin, PluginState, PluginConfig, ExecutionPlugin, VenuePlugin
from .config_manager import ConfigManager

__all__ = [
    "EventBus",
    "Event",
    "EventType",
    "Plugin",
    "PluginState",
    "PluginConfig",
    "ExecutionPlugin",
    "VenuePlugin",
    "ConfigManager",
]
