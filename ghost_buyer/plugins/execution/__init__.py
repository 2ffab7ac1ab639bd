# GHOST BUYER Execution Plugins
"""
Execution plugins that drive stealth plans.

Available Plugins:
    - Stealth Executor (chunked, time-spaced plan execution)
"""

from .stealth_executor import ExecutionReport, StealthExecutor, StealthExecutorConfig, StepResult

__all__ = [
    "ExecutionReport",
    "StealthExecutor",
    "StealthExecutorConfig",
    "StepResult",
]
