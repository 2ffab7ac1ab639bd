"""
GHOST BUYER - Stealth Executor Plugin
=====================================

Drives a stealth execution plan against a trade venue.

Features:
- Balance check before planning
- Strictly sequential step execution with planned delays
- Failed steps recorded, execution continues (no retry)
- Cancellation checked before and after every delay
- Pattern analysis and stealth score after each run

Author: GHOST Development Team
Version: 1.0.0
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple, Union
from uuid import uuid4

from ghost_buyer.core.event_bus import Event, EventType
from ghost_buyer.core.plugin_base import ExecutionPlugin, PluginCategory, PluginConfig
from shared.ghost_core.constants import BASE_ASSET, DEFAULT_VENUE
from shared.ghost_core.exceptions import (
    ExecutionInProgressError,
    InsufficientFundsError,
    InvalidOrderError,
)
from shared.ghost_core.execution_history import ExecutionHistory
from shared.ghost_core.network_tuning import NetworkConditions, optimize_for_network_conditions
from shared.ghost_core.pattern_analyzer import PatternAnalysis, PatternAnalyzer, RiskLevel
from shared.ghost_core.plan_generator import (
    ExecutionPlan,
    ExecutionStep,
    PlanGenerator,
    StealthSettings,
)

logger = logging.getLogger("GHOST_StealthExecutor")

SleepFunc = Callable[[float], Awaitable[None]]


def _new_execution_id() -> str:
    return f"exec_{uuid4().hex[:12]}"


@dataclass
class StealthExecutorConfig:
    """Stealth executor configuration."""

    token_in: str = BASE_ASSET
    venue_id: str = DEFAULT_VENUE
    address: str = ""
    check_balance: bool = True
    alert_on_high_risk: bool = True
    settings: StealthSettings = field(default_factory=StealthSettings)


@dataclass
class StepResult:
    """Outcome of one attempted step."""

    step: ExecutionStep
    success: bool
    received_amount: float = 0.0
    reference: Optional[str] = None
    error: Optional[str] = None
    completed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.step.to_dict(),
            "status": "completed" if self.success else "failed",
            "received_amount": self.received_amount,
            "reference": self.reference,
            "error": self.error,
            "completed_at": self.completed_at.isoformat(),
        }


@dataclass
class ExecutionReport:
    """Result of driving one plan."""

    plan: ExecutionPlan
    token_in: str
    token_out: str
    venue_id: str
    results: List[StepResult]
    cancelled: bool
    analysis: PatternAnalysis
    stealth_score: int
    execution_id: str = ""

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def executed_amount(self) -> float:
        return sum(r.step.amount for r in self.results if r.success)

    @property
    def received_amount(self) -> float:
        return sum(r.received_amount for r in self.results)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "execution_id": self.execution_id,
            "success": self.succeeded > 0 and not self.cancelled,
            "token_in": self.token_in,
            "token_out": self.token_out,
            "venue_id": self.venue_id,
            "total_amount": self.plan.total_amount,
            "executed_amount": self.executed_amount,
            "received_amount": self.received_amount,
            "steps_planned": self.plan.step_count,
            "steps_succeeded": self.succeeded,
            "steps_failed": self.failed,
            "cancelled": self.cancelled,
            "estimated_duration_minutes": self.plan.estimated_duration_minutes,
            "step_results": [r.to_dict() for r in self.results],
            "analysis": self.analysis.to_dict(),
            "stealth_score": self.stealth_score,
        }


class StealthExecutor(ExecutionPlugin):
    """
    Stealth Executor.

    Executes a trade intent as a stealth plan:
    1. Checks the requested amount against the venue balance
    2. Generates the plan (chunks, shuffle, delays)
    3. Waits each step's delay, then awaits the venue swap
    4. Records every attempt into the execution history
    5. Scores the history and raises a risk alert when high

    Only one plan runs at a time. The history belongs to this executor
    (or to the caller that injected it) and is never shared implicitly.

    Example:
        venue = PaperDex()
        await venue.connect()
        executor = StealthExecutor(venue)
        result = await executor.execute_order({
            "token_out": "SNEK",
            "amount": 500.0,
            "settings": {"minChunk": 25, "maxChunk": 100, "mode": "stealth"},
        })
    """

    def __init__(
        self,
        venue: Any,
        config: Optional[StealthExecutorConfig] = None,
        generator: Optional[PlanGenerator] = None,
        analyzer: Optional[PatternAnalyzer] = None,
        history: Optional[ExecutionHistory] = None,
        sleep: Optional[SleepFunc] = None,
    ):
        config = config or StealthExecutorConfig()
        super().__init__(PluginConfig(
            name="stealth_executor",
            version="1.0.0",
            category=PluginCategory.EXECUTION,
            settings={
                "token_in": config.token_in,
                "venue_id": config.venue_id,
                "check_balance": config.check_balance,
                **config.settings.to_dict(),
            },
        ))

        self.executor_config = config
        self.venue = venue
        self.generator = generator or PlanGenerator()
        self.analyzer = analyzer or PatternAnalyzer()
        self.history = history if history is not None else ExecutionHistory()
        self._sleep = sleep or asyncio.sleep

        self._executing = False
        self._cancel_requested = False
        self._plans_executed = 0
        self._steps_attempted = 0
        self._steps_failed = 0

    @property
    def is_executing(self) -> bool:
        return self._executing

    def preview(
        self,
        amount: float,
        settings: Optional[Union[StealthSettings, Mapping[str, Any]]] = None,
    ) -> ExecutionPlan:
        """Generate a plan without executing it."""
        return self.generator.generate_plan(amount, self._resolve_settings(settings))

    def cancel(self) -> bool:
        """
        Request cancellation of the running plan.

        Takes effect at the next delay boundary; an in-flight swap is
        allowed to settle.

        Returns:
            True if a plan was running
        """
        if not self._executing:
            return False
        self._cancel_requested = True
        self._logger.info("Cancellation requested")
        return True

    def stealth_score(self) -> int:
        """Current stealth score over this executor's history."""
        return self.analyzer.stealth_score(self.history)

    async def execute_order(self, order_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Execute a trade intent with stealth chunking.

        Args:
            order_data: token_out, amount, and optionally token_in,
                venue_id, address, settings, network_conditions

        Returns:
            Execution report as a dictionary

        Raises:
            InvalidOrderError: missing token, bad amount or bad conditions
            InvalidSettingsError: malformed settings
            InsufficientFundsError: amount exceeds the venue balance
            ExecutionInProgressError: a plan is already running
        """
        self._reserve()
        try:
            token_out = order_data.get("token_out")
            if not token_out:
                raise InvalidOrderError("token_out is required")

            try:
                amount = float(order_data.get("amount"))
            except (TypeError, ValueError):
                raise InvalidOrderError(
                    f"Invalid amount: {order_data.get('amount')!r}"
                ) from None

            token_in = order_data.get("token_in", self.executor_config.token_in)
            venue_id = order_data.get("venue_id", self.executor_config.venue_id)
            address = order_data.get("address", self.executor_config.address)

            settings = self._resolve_settings(order_data.get("settings"))
            conditions = order_data.get("network_conditions")
            if conditions:
                if not isinstance(conditions, NetworkConditions):
                    try:
                        conditions = NetworkConditions(**conditions)
                    except TypeError:
                        raise InvalidOrderError(
                            f"Invalid network_conditions: {conditions!r}"
                        ) from None
                settings = optimize_for_network_conditions(settings, conditions)

            if self.executor_config.check_balance:
                await self._check_balance(address, amount)

            plan = self.generator.generate_plan(amount, settings)
            execution_id = _new_execution_id()

            await self._publish(Event(
                event_type=EventType.PLAN_GENERATED,
                data=plan.preview(),
                source=self.name,
                correlation_id=execution_id,
            ))

            results, cancelled = await self._run_steps(
                plan, token_in, token_out, venue_id, execution_id
            )
        finally:
            self._release()

        report = await self._finish(
            plan, token_in, token_out, venue_id, execution_id, results, cancelled
        )
        return report.to_dict()

    async def execute_plan(
        self,
        plan: ExecutionPlan,
        token_out: str,
        token_in: Optional[str] = None,
        venue_id: Optional[str] = None,
    ) -> ExecutionReport:
        """
        Execute plan steps strictly in sequence.

        Args:
            plan: Plan to execute
            token_out: Token being bought
            token_in: Token being spent (default from config)
            venue_id: Venue to route swaps to (default from config)

        Returns:
            ExecutionReport
        """
        token_in = token_in or self.executor_config.token_in
        venue_id = venue_id or self.executor_config.venue_id
        execution_id = _new_execution_id()

        self._reserve()
        try:
            results, cancelled = await self._run_steps(
                plan, token_in, token_out, venue_id, execution_id
            )
        finally:
            self._release()

        return await self._finish(
            plan, token_in, token_out, venue_id, execution_id, results, cancelled
        )

    def _reserve(self) -> None:
        """Claim the executor for one intent, from validation to the last step."""
        if self._executing:
            raise ExecutionInProgressError("A stealth plan is already executing")
        self._executing = True
        self._cancel_requested = False

    def _release(self) -> None:
        self._executing = False
        self._cancel_requested = False

    async def _run_steps(
        self,
        plan: ExecutionPlan,
        token_in: str,
        token_out: str,
        venue_id: str,
        execution_id: str,
    ) -> Tuple[List[StepResult], bool]:
        """Wait and submit each step; returns results and whether it was cancelled."""
        results: List[StepResult] = []

        self._logger.info(
            f"Stealth executing {plan.total_amount} {token_in} -> {token_out} "
            f"in {plan.step_count} steps on {venue_id} ({execution_id})"
        )

        await self._publish(Event(
            event_type=EventType.EXECUTION_STARTED,
            data={"token_out": token_out, "venue_id": venue_id, **plan.preview()},
            source=self.name,
            correlation_id=execution_id,
        ))

        for step in plan.steps:
            if self._cancel_requested:
                return results, True

            if step.delay_ms > 0:
                self._logger.info(
                    f"Waiting {step.delay_seconds:.0f}s before step "
                    f"{step.sequence_index}/{plan.step_count}"
                )
                await self._sleep(step.delay_seconds)

            if self._cancel_requested:
                return results, True

            result = await self._execute_step(
                step, plan, token_in, token_out, venue_id, execution_id
            )
            results.append(result)

        return results, False

    async def _finish(
        self,
        plan: ExecutionPlan,
        token_in: str,
        token_out: str,
        venue_id: str,
        execution_id: str,
        results: List[StepResult],
        cancelled: bool,
    ) -> ExecutionReport:
        """Score the history, build the report and publish the outcome."""
        self._plans_executed += 1
        analysis = self.analyzer.analyze(self.history)
        score = self.analyzer.stealth_score(self.history)

        report = ExecutionReport(
            plan=plan,
            token_in=token_in,
            token_out=token_out,
            venue_id=venue_id,
            results=results,
            cancelled=cancelled,
            analysis=analysis,
            stealth_score=score,
            execution_id=execution_id,
        )

        summary = {
            "token_out": token_out,
            "steps_planned": plan.step_count,
            "steps_succeeded": report.succeeded,
            "steps_failed": report.failed,
            "executed_amount": report.executed_amount,
            "stealth_score": score,
        }

        if cancelled:
            self._logger.warning(
                f"Stealth execution cancelled after {len(results)}/{plan.step_count} steps"
            )
            await self._publish(Event(
                event_type=EventType.EXECUTION_CANCELLED,
                data=summary,
                source=self.name,
                correlation_id=execution_id,
            ))
        else:
            self._logger.info(
                f"Stealth execution complete: {report.succeeded}/{plan.step_count} "
                f"steps succeeded, score {score}"
            )
            await self._publish(Event(
                event_type=EventType.EXECUTION_COMPLETED,
                data=summary,
                source=self.name,
                correlation_id=execution_id,
            ))

        if self.executor_config.alert_on_high_risk and analysis.risk_level == RiskLevel.HIGH:
            await self._publish(Event(
                event_type=EventType.RISK_ALERT,
                data=analysis.to_dict(),
                source=self.name,
                correlation_id=execution_id,
            ))

        return report


    async def _execute_step(
        self,
        step: ExecutionStep,
        plan: ExecutionPlan,
        token_in: str,
        token_out: str,
        venue_id: str,
        execution_id: str,
    ) -> StepResult:
        """Submit one step and wait for the venue to settle it."""
        self._logger.info(
            f"Executing step {step.sequence_index}/{plan.step_count}: "
            f"{step.amount:.2f} {token_in}"
        )
        await self._publish(Event(
            event_type=EventType.STEP_SUBMITTED,
            data={**step.to_dict(), "token_out": token_out, "venue_id": venue_id},
            source=self.name,
            correlation_id=execution_id,
        ))

        self._steps_attempted += 1
        try:
            swap = await self.venue.execute_swap(token_in, token_out, step.amount, venue_id)
            success, received, reference, error = self._read_swap(swap)
        except Exception as e:
            success, received, reference, error = False, 0.0, None, str(e)

        self.history.record(
            amount=step.amount,
            delay_seconds=step.delay_seconds,
            success=success,
            reference=reference,
            error=error,
        )
        result = StepResult(
            step=step,
            success=success,
            received_amount=received,
            reference=reference,
            error=error,
        )

        if success:
            await self._publish(Event(
                event_type=EventType.STEP_FILLED,
                data=result.to_dict(),
                source=self.name,
                correlation_id=execution_id,
            ))
        else:
            self._steps_failed += 1
            self._stats["errors"] += 1
            self._logger.error(f"Step {step.sequence_index} failed: {error}")
            await self._publish(Event(
                event_type=EventType.STEP_FAILED,
                data=result.to_dict(),
                source=self.name,
                correlation_id=execution_id,
            ))

        return result

    @staticmethod
    def _read_swap(swap: Any) -> Tuple[bool, float, Optional[str], Optional[str]]:
        """Normalize a venue response (object or mapping)."""
        if isinstance(swap, Mapping):
            get = swap.get
        else:
            def get(key, default=None):
                return getattr(swap, key, default)

        success = bool(get("success", True))
        received = float(get("received_amount", 0.0) or 0.0)
        reference = get("reference")
        error = None if success else (get("error") or "Swap reported failure")
        return success, received if success else 0.0, reference, error

    async def _check_balance(self, address: str, amount: float) -> None:
        """Reject the intent before planning if funds are short."""
        get_balance = getattr(self.venue, "get_balance", None)
        if get_balance is None:
            return

        available = await get_balance(address)
        if amount > available:
            raise InsufficientFundsError(
                f"Insufficient balance: requested {amount:.2f}, available {available:.2f}",
                required=amount,
                available=available,
            )

    def _resolve_settings(
        self, settings: Optional[Union[StealthSettings, Mapping[str, Any]]]
    ) -> StealthSettings:
        if settings is None:
            return self.executor_config.settings
        if isinstance(settings, StealthSettings):
            return settings
        return StealthSettings.from_dict(settings)

    def get_stats(self) -> Dict[str, Any]:
        """Get executor statistics."""
        return {
            **super().get_stats(),
            "plans_executed": self._plans_executed,
            "steps_attempted": self._steps_attempted,
            "steps_failed": self._steps_failed,
            "history_size": len(self.history),
            "stealth_score": self.stealth_score(),
            "executing": self._executing,
        }


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "StealthExecutorConfig",
    "StepResult",
    "ExecutionReport",
    "StealthExecutor",
]
