"""
GHOST Test Configuration
========================

Pytest fixtures and configuration for GHOST BUYER tests.
"""

import random
from itertools import cycle
from typing import Iterable, List

import pytest

from shared.ghost_core.execution_history import ExecutionRecord
from shared.ghost_core.plan_generator import StealthSettings


class ScriptedRandom:
    """RNG stub replaying a fixed sequence of random() values."""

    def __init__(self, values: Iterable[float]):
        self._values = cycle(list(values))
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return next(self._values)


@pytest.fixture
def scripted_rng():
    """Factory for scripted RNG stubs."""
    return ScriptedRandom


@pytest.fixture
def seeded_rng():
    """Deterministic RNG."""
    return random.Random(42)


@pytest.fixture
def stealth_settings():
    """Default UI settings in stealth mode."""
    return StealthSettings(
        min_chunk=25,
        max_chunk=100,
        min_delay_seconds=30,
        max_delay_seconds=180,
        mode="stealth",
    )


@pytest.fixture
def aggressive_settings():
    """Default UI settings in aggressive mode."""
    return StealthSettings(
        min_chunk=25,
        max_chunk=100,
        min_delay_seconds=30,
        max_delay_seconds=180,
        mode="aggressive",
    )


@pytest.fixture
def make_records():
    """Build execution records from parallel amount/delay lists."""
    def _make(amounts: List[float], delays: List[float]) -> List[ExecutionRecord]:
        return [
            ExecutionRecord(amount=amount, delay_seconds=delay)
            for amount, delay in zip(amounts, delays)
        ]
    return _make
