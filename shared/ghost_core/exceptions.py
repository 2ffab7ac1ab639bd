"""
GHOST Core - Centralized Exception Hierarchy
============================================

Structured exception types for the stealth execution planner
and the runtime that drives it.

Exception Categories:
    - ConfigurationError: Malformed settings and configuration
    - OrderError: Trade intent validation and per-step venue failures
    - ExecutionStateError: Executor lifecycle violations

Author: GHOST Development Team
Version: 1.0.0
"""

from typing import Any, Dict, Optional


class GhostError(Exception):
    """
    Base exception for all GHOST errors.

    Attributes:
        message: Human-readable error description
        code: Optional error code for programmatic handling
        details: Optional dict with additional context
        recoverable: Whether the caller can continue after this error
    """

    recoverable: bool = True

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigurationError(GhostError):
    """Base exception for configuration errors."""

    recoverable: bool = False


class InvalidConfigError(ConfigurationError):
    """Invalid configuration value."""

    pass


class InvalidSettingsError(ConfigurationError):
    """Stealth settings bounds are malformed (fatal to plan generation)."""

    def __init__(self, message: str, field_name: Optional[str] = None, **kwargs):
        kwargs.setdefault("code", "INVALID_SETTINGS")
        super().__init__(message, **kwargs)
        self.field_name = field_name


# =============================================================================
# ORDER & EXECUTION ERRORS
# =============================================================================


class OrderError(GhostError):
    """Base exception for trade intent and execution errors."""

    pass


class InvalidOrderError(OrderError):
    """Trade intent parameters are invalid."""

    recoverable: bool = False


class InsufficientFundsError(OrderError):
    """Requested total exceeds the available balance."""

    recoverable: bool = False

    def __init__(
        self, message: str, required: float = 0.0, available: float = 0.0, **kwargs
    ):
        kwargs.setdefault("code", "INSUFFICIENT_FUNDS")
        super().__init__(message, **kwargs)
        self.required = required
        self.available = available


class TradeExecutionError(OrderError):
    """A single swap attempt failed at the venue."""

    def __init__(
        self,
        message: str,
        venue_id: Optional[str] = None,
        amount: Optional[float] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.venue_id = venue_id
        self.amount = amount


# =============================================================================
# EXECUTOR STATE ERRORS
# =============================================================================


class ExecutionStateError(GhostError):
    """Base exception for executor state violations."""

    pass


class ExecutionInProgressError(ExecutionStateError):
    """A plan is already running on this executor."""

    pass


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================


def is_recoverable(error: Exception) -> bool:
    """
    Determine if an error is recoverable.

    Recoverable errors are recorded and execution continues.
    Non-recoverable errors must be reported to the caller.
    """
    if hasattr(error, "recoverable"):
        return error.recoverable

    return not isinstance(error, (SystemExit, KeyboardInterrupt, MemoryError))


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "GhostError",
    "ConfigurationError",
    "InvalidConfigError",
    "InvalidSettingsError",
    "OrderError",
    "InvalidOrderError",
    "InsufficientFundsError",
    "TradeExecutionError",
    "ExecutionStateError",
    "ExecutionInProgressError",
    "is_recoverable",
]
