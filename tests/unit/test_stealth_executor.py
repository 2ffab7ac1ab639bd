"""
Tests for Stealth Executor
==========================

Tests sequential plan execution, failure handling, cancellation,
balance checks and the events emitted along the way.
"""

import asyncio
import random

import pytest

from ghost_buyer.core.event_bus import EventBus, EventType
from ghost_buyer.plugins.execution.stealth_executor import (
    StealthExecutor,
    StealthExecutorConfig,
)
from ghost_buyer.plugins.venues.paper_dex import PaperDex, PaperDexConfig
from shared.ghost_core.exceptions import (
    ExecutionInProgressError,
    InsufficientFundsError,
    InvalidOrderError,
    TradeExecutionError,
)
from shared.ghost_core.execution_history import ExecutionHistory
from shared.ghost_core.plan_generator import PlanGenerator, StealthSettings

SEED = 5


class FakeVenue:
    """Venue double recording every swap into a shared log."""

    def __init__(self, log, balance=10000.0, fail_on=(), response=None):
        self.log = log
        self.balance = balance
        self.fail_on = set(fail_on)
        self.response = response
        self.calls = []

    async def get_balance(self, address):
        return self.balance

    async def execute_swap(self, token_in, token_out, amount, venue_id):
        self.calls.append(amount)
        self.log.append(("swap", amount))
        if len(self.calls) in self.fail_on:
            raise TradeExecutionError("rejected by pool", venue_id=venue_id, amount=amount)
        if self.response is not None:
            return self.response
        return {
            "success": True,
            "received_amount": amount * 100,
            "reference": f"tx{len(self.calls)}",
        }


class SlowBalanceVenue(FakeVenue):
    """Venue whose balance lookup blocks until a gate opens."""

    def __init__(self, log, gate):
        super().__init__(log)
        self.gate = gate
        self.balance_calls = 0

    async def get_balance(self, address):
        self.balance_calls += 1
        await self.gate.wait()
        return self.balance


class RecordingSleep:
    """Sleep double that logs waits and runs an optional hook."""

    def __init__(self, log, hook=None):
        self.log = log
        self.hook = hook

    async def __call__(self, seconds):
        self.log.append(("sleep", seconds))
        if self.hook:
            self.hook()


@pytest.fixture
def log():
    """Shared call log."""
    return []


@pytest.fixture
def venue(log):
    """Venue that fills everything."""
    return FakeVenue(log)


@pytest.fixture
def executor_config(stealth_settings):
    """Executor config without risk alerts."""
    return StealthExecutorConfig(
        address="addr_test1",
        alert_on_high_risk=False,
        settings=stealth_settings,
    )


@pytest.fixture
def make_executor(log, executor_config):
    """Build executors with a seeded generator and a recording sleep."""
    def _make(venue, config=None, sleep=None, history=None):
        return StealthExecutor(
            venue,
            config=config or executor_config,
            generator=PlanGenerator(rng=random.Random(SEED)),
            history=history,
            sleep=sleep or RecordingSleep(log),
        )
    return _make


def _expected_plan(total, settings):
    return PlanGenerator(rng=random.Random(SEED)).generate_plan(total, settings)


class TestSequentialExecution:
    """Tests for strictly ordered step execution."""

    @pytest.mark.asyncio
    async def test_steps_executed_in_plan_order(self, make_executor, venue, log, stealth_settings):
        """Each step waits its delay, then swaps, in plan order."""
        executor = make_executor(venue)
        report = await executor.execute_order({"token_out": "SNEK", "amount": 500})

        plan = _expected_plan(500, stealth_settings)
        expected_log = []
        for step in plan.steps:
            if step.delay_ms > 0:
                expected_log.append(("sleep", step.delay_seconds))
            expected_log.append(("swap", step.amount))

        assert log == expected_log
        assert report["success"] is True
        assert report["steps_planned"] == plan.step_count
        assert report["steps_succeeded"] == plan.step_count
        assert report["executed_amount"] == pytest.approx(500.0, abs=0.01)

    @pytest.mark.asyncio
    async def test_first_step_not_delayed(self, make_executor, venue, log):
        """The first swap happens before any wait."""
        executor = make_executor(venue)
        await executor.execute_order({"token_out": "SNEK", "amount": 500})
        assert log[0][0] == "swap"

    @pytest.mark.asyncio
    async def test_history_records_every_step(self, make_executor, venue):
        """Every executed step lands in the history."""
        history = ExecutionHistory(capacity=100)
        executor = make_executor(venue, history=history)

        report = await executor.execute_order({"token_out": "SNEK", "amount": 500})

        assert len(history) == report["steps_planned"]
        assert [r.amount for r in history] == venue.calls
        assert history.records()[0].delay_seconds == 0


class TestFailureHandling:
    """Tests for failed steps."""

    @pytest.mark.asyncio
    async def test_failed_step_recorded_and_execution_continues(self, make_executor, log):
        """A raising venue fails one step; later steps still run."""
        venue = FakeVenue(log, fail_on={2})
        history = ExecutionHistory()
        executor = make_executor(venue, history=history)

        report = await executor.execute_order({"token_out": "SNEK", "amount": 500})

        assert report["steps_failed"] == 1
        assert report["steps_succeeded"] == report["steps_planned"] - 1
        assert len(venue.calls) == report["steps_planned"]
        assert report["step_results"][1]["status"] == "failed"
        assert "rejected by pool" in report["step_results"][1]["error"]

        failed = history.records()[1]
        assert failed.success is False
        assert "rejected by pool" in failed.error
        assert len(history) == report["steps_planned"]

    @pytest.mark.asyncio
    async def test_reported_failure_recorded(self, make_executor, log):
        """A venue response with success=False counts as a failed step."""
        venue = FakeVenue(log, response={"success": False, "error": "pool drained"})
        executor = make_executor(venue)

        report = await executor.execute_order({"token_out": "SNEK", "amount": 100})

        assert report["steps_succeeded"] == 0
        assert report["success"] is False
        assert all(r["error"] == "pool drained" for r in report["step_results"])
        assert report["received_amount"] == 0


class TestBalanceCheck:
    """Tests for the pre-planning balance check."""

    @pytest.mark.asyncio
    async def test_insufficient_funds(self, make_executor, log):
        """Amounts above the balance are rejected before planning."""
        venue = FakeVenue(log, balance=50.0)
        history = ExecutionHistory()
        executor = make_executor(venue, history=history)

        with pytest.raises(InsufficientFundsError) as exc_info:
            await executor.execute_order({"token_out": "SNEK", "amount": 100})

        assert exc_info.value.required == 100
        assert exc_info.value.available == 50.0
        assert venue.calls == []
        assert len(history) == 0
        assert not executor.is_executing

    @pytest.mark.asyncio
    async def test_balance_check_disabled(self, make_executor, log, stealth_settings):
        """With the check disabled the plan runs regardless."""
        venue = FakeVenue(log, balance=0.0)
        config = StealthExecutorConfig(check_balance=False, settings=stealth_settings)
        executor = make_executor(venue, config=config)

        report = await executor.execute_order({"token_out": "SNEK", "amount": 100})
        assert report["steps_succeeded"] == report["steps_planned"]


class TestCancellation:
    """Tests for cancelling a running plan."""

    @pytest.mark.asyncio
    async def test_cancel_during_delay(self, make_executor, venue, log):
        """Cancelling during a wait stops before the next swap."""
        executor = None

        def cancel():
            assert executor.cancel() is True

        executor = make_executor(venue, sleep=RecordingSleep(log, hook=cancel))
        bus = EventBus()
        await executor.initialize(bus)

        report = await executor.execute_order({"token_out": "SNEK", "amount": 500})

        assert report["cancelled"] is True
        assert report["success"] is False
        assert report["steps_succeeded"] == 1
        assert len(venue.calls) == 1
        assert len(executor.history) == 1
        assert not executor.is_executing
        assert bus.get_history(EventType.EXECUTION_CANCELLED)
        assert not bus.get_history(EventType.EXECUTION_COMPLETED)

    def test_cancel_when_idle(self, make_executor, venue):
        """Cancel with nothing running is a no-op."""
        assert make_executor(venue).cancel() is False

    @pytest.mark.asyncio
    async def test_executor_reusable_after_cancel(self, make_executor, venue, log):
        """A cancelled executor runs the next plan to completion."""
        calls = {"n": 0}

        def cancel_once():
            calls["n"] += 1
            if calls["n"] == 1:
                executor.cancel()

        executor = make_executor(venue, sleep=RecordingSleep(log, hook=cancel_once))

        first = await executor.execute_order({"token_out": "SNEK", "amount": 500})
        second = await executor.execute_order({"token_out": "SNEK", "amount": 200})

        assert first["cancelled"] is True
        assert second["cancelled"] is False
        assert second["steps_succeeded"] == second["steps_planned"]


class TestConcurrency:
    """Tests for one-plan-at-a-time execution."""

    @pytest.mark.asyncio
    async def test_second_plan_rejected_while_running(self, make_executor, venue):
        """A second intent fails fast while a plan is in flight."""
        gate = asyncio.Event()

        async def gated_sleep(seconds):
            await gate.wait()

        executor = make_executor(venue, sleep=gated_sleep)
        task = asyncio.create_task(executor.execute_order({"token_out": "SNEK", "amount": 500}))

        for _ in range(20):
            await asyncio.sleep(0)
            if executor.is_executing:
                break
        assert executor.is_executing

        with pytest.raises(ExecutionInProgressError):
            await executor.execute_order({"token_out": "HOSKY", "amount": 100})

        gate.set()
        report = await task
        assert report["steps_succeeded"] == report["steps_planned"]
        assert not executor.is_executing

    @pytest.mark.asyncio
    async def test_second_intent_rejected_during_balance_check(self, make_executor, log):
        """The executor is claimed before the balance lookup, not at the first step."""
        gate = asyncio.Event()
        venue = SlowBalanceVenue(log, gate)
        executor = make_executor(venue)
        bus = EventBus()
        await executor.initialize(bus)

        task = asyncio.create_task(executor.execute_order({"token_out": "SNEK", "amount": 500}))
        for _ in range(20):
            await asyncio.sleep(0)
            if venue.balance_calls:
                break
        assert executor.is_executing

        with pytest.raises(ExecutionInProgressError):
            await executor.execute_order({"token_out": "HOSKY", "amount": 100})

        gate.set()
        await task
        assert venue.balance_calls == 1
        assert len(bus.get_history(EventType.PLAN_GENERATED)) == 1
        assert not executor.is_executing

    @pytest.mark.asyncio
    async def test_rejected_intent_releases_executor(self, make_executor, venue):
        """A malformed intent does not leave the executor claimed."""
        executor = make_executor(venue)
        with pytest.raises(InvalidOrderError):
            await executor.execute_order({"token_out": "SNEK", "amount": "lots"})
        assert not executor.is_executing

        report = await executor.execute_order({"token_out": "SNEK", "amount": 100})
        assert report["steps_succeeded"] == report["steps_planned"]


class TestEvents:
    """Tests for published events."""

    @pytest.mark.asyncio
    async def test_event_sequence(self, make_executor, venue):
        """Plan, start, per-step submit/fill, completion."""
        bus = EventBus()
        received = []

        async def handler(event):
            received.append(event.event_type)

        bus.subscribe(
            "observer",
            {
                EventType.PLAN_GENERATED,
                EventType.EXECUTION_STARTED,
                EventType.STEP_SUBMITTED,
                EventType.STEP_FILLED,
                EventType.STEP_FAILED,
                EventType.EXECUTION_COMPLETED,
                EventType.RISK_ALERT,
            },
            handler,
        )

        executor = make_executor(venue)
        await executor.initialize(bus)
        report = await executor.execute_order({"token_out": "SNEK", "amount": 300})

        n = report["steps_planned"]
        expected = (
            [EventType.PLAN_GENERATED, EventType.EXECUTION_STARTED]
            + [EventType.STEP_SUBMITTED, EventType.STEP_FILLED] * n
            + [EventType.EXECUTION_COMPLETED]
        )
        assert received == expected

    @pytest.mark.asyncio
    async def test_events_share_execution_id(self, make_executor, venue):
        """Every event of one run carries the run's execution id."""
        bus = EventBus()
        executor = make_executor(venue)
        await executor.initialize(bus)

        report = await executor.execute_order({"token_out": "SNEK", "amount": 300})

        run_events = [e for e in bus.get_history() if e.source == executor.name]
        assert report["execution_id"].startswith("exec_")
        assert {e.correlation_id for e in run_events} == {report["execution_id"]}

    @pytest.mark.asyncio
    async def test_risk_alert_on_uniform_sizes(self, make_executor, venue):
        """Identical chunk sizes trigger a high-risk alert."""
        settings = StealthSettings(min_chunk=50, max_chunk=50)
        config = StealthExecutorConfig(alert_on_high_risk=True, settings=settings)
        executor = make_executor(venue, config=config)
        bus = EventBus()
        await executor.initialize(bus)

        report = await executor.execute_order({"token_out": "SNEK", "amount": 250})

        assert venue.calls == [50.0] * 5
        assert report["analysis"]["risk"] == "high"
        assert report["stealth_score"] == 60
        alerts = bus.get_history(EventType.RISK_ALERT)
        assert len(alerts) == 1
        assert alerts[0].data["risk"] == "high"


class TestOrderInput:
    """Tests for trade intent parsing."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("order", [
        {"amount": 100},
        {"token_out": "", "amount": 100},
        {"token_out": "SNEK", "amount": "lots"},
        {"token_out": "SNEK"},
        {"token_out": "SNEK", "amount": -5},
    ])
    async def test_invalid_orders(self, make_executor, venue, order):
        """Malformed intents raise InvalidOrderError."""
        with pytest.raises(InvalidOrderError):
            await make_executor(venue).execute_order(order)
        assert venue.calls == []

    @pytest.mark.asyncio
    async def test_camel_case_settings(self, make_executor, venue):
        """Per-order UI settings override the configured ones."""
        executor = make_executor(venue)
        report = await executor.execute_order({
            "token_out": "SNEK",
            "amount": 200,
            "settings": {"minChunk": 10, "maxChunk": 20, "mode": "aggressive"},
        })

        for result in report["step_results"][:-1]:
            assert 10 <= result["amount"] <= 20

    @pytest.mark.asyncio
    async def test_network_conditions_applied(self, make_executor, venue):
        """High congestion lifts every delay above the congested floor."""
        executor = make_executor(venue)
        report = await executor.execute_order({
            "token_out": "SNEK",
            "amount": 300,
            "settings": {"minDelay": 1, "maxDelay": 2},
            "network_conditions": {"congestion": "high"},
        })

        for result in report["step_results"][1:]:
            assert result["delay_ms"] >= 30000


    @pytest.mark.asyncio
    async def test_unknown_network_condition_key(self, make_executor, venue):
        """Unknown condition keys are an order error, not a TypeError."""
        executor = make_executor(venue)
        with pytest.raises(InvalidOrderError):
            await executor.execute_order({
                "token_out": "SNEK",
                "amount": 100,
                "network_conditions": {"weather": "stormy"},
            })
        assert venue.calls == []
        assert not executor.is_executing


class TestPreviewAndStats:
    """Tests for preview, scoring and statistics."""

    def test_preview_does_not_execute(self, make_executor, venue, stealth_settings):
        """Preview returns the plan without touching the venue."""
        plan = make_executor(venue).preview(500)
        assert plan == _expected_plan(500, stealth_settings)
        assert venue.calls == []

    @pytest.mark.asyncio
    async def test_stats_and_score(self, make_executor, venue):
        """Stats reflect executed plans and history size."""
        executor = make_executor(venue)
        assert executor.stealth_score() == 85

        report = await executor.execute_order({"token_out": "SNEK", "amount": 500})

        stats = executor.get_stats()
        assert stats["plans_executed"] == 1
        assert stats["steps_attempted"] == report["steps_planned"]
        assert stats["history_size"] == report["steps_planned"]
        assert stats["stealth_score"] == report["stealth_score"]
        assert stats["executing"] is False


class TestPaperDexIntegration:
    """End-to-end run against the paper venue."""

    @pytest.mark.asyncio
    async def test_paper_run(self, make_executor):
        """Paper wallet is debited by exactly the executed amount."""
        dex = PaperDex(
            PaperDexConfig(initial_balance=1000.0, failure_probability=0.0),
            rng=random.Random(1),
        )
        await dex.connect()
        executor = make_executor(dex)

        report = await executor.execute_order({"token_out": "SNEK", "amount": 400})

        assert report["steps_succeeded"] == report["steps_planned"]
        assert await dex.get_balance("") == pytest.approx(600.0, abs=0.01)
        assert report["received_amount"] > 0
        assert all(len(r["reference"]) == 64 for r in report["step_results"])
