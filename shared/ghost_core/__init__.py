# GHOST Core - Stealth Planning Logic
"""
Core planning and analysis logic for the GHOST platform.

Modules:
    constants: Algorithm constants and thresholds
    exceptions: Centralized exception hierarchy
    plan_generator: Chunking, timing and ordering of execution plans
    execution_history: Bounded ring buffer of executed steps
    pattern_analyzer: Detection risk analysis and stealth score
    network_tuning: Network-condition adjustments and anti-MEV hints
"""

from .constants import (
    VERSION,
    SYSTEM_NAME,
    BASE_ASSET,
    MAX_CHUNK_ITERATIONS,
    DEFAULT_HISTORY_CAPACITY,
    SUPPORTED_VENUES,
)

from .exceptions import (
    GhostError,
    ConfigurationError,
    InvalidConfigError,
    InvalidSettingsError,
    OrderError,
    InvalidOrderError,
    InsufficientFundsError,
    TradeExecutionError,
    ExecutionInProgressError,
    is_recoverable,
)

from .plan_generator import (
    StealthMode,
    StealthSettings,
    ChunkKind,
    Chunk,
    ExecutionStep,
    ExecutionPlan,
    PlanGenerator,
)

from .execution_history import (
    ExecutionRecord,
    ExecutionHistory,
)

from .pattern_analyzer import (
    RiskLevel,
    PatternAnalysis,
    PatternAnalyzer,
)

from .network_tuning import (
    NetworkConditions,
    AntiMEVStrategy,
    optimize_for_network_conditions,
    anti_mev_strategy,
)

__version__ = "1.0.0"

__all__ = [
    # Version
    "__version__",

    # Constants
    "VERSION",
    "SYSTEM_NAME",
    "BASE_ASSET",
    "MAX_CHUNK_ITERATIONS",
    "DEFAULT_HISTORY_CAPACITY",
    "SUPPORTED_VENUES",

    # Exceptions
    "GhostError",
    "ConfigurationError",
    "InvalidConfigError",
    "InvalidSettingsError",
    "OrderError",
    "InvalidOrderError",
    "InsufficientFundsError",
    "TradeExecutionError",
    "ExecutionInProgressError",
    "is_recoverable",

    # Plan Generator
    "StealthMode",
    "StealthSettings",
    "ChunkKind",
    "Chunk",
    "ExecutionStep",
    "ExecutionPlan",
    "PlanGenerator",

    # Execution History
    "ExecutionRecord",
    "ExecutionHistory",

    # Pattern Analyzer
    "RiskLevel",
    "PatternAnalysis",
    "PatternAnalyzer",

    # Network Tuning
    "NetworkConditions",
    "AntiMEVStrategy",
    "optimize_for_network_conditions",
    "anti_mev_strategy",
]
