"""
GHOST Core - Stealth Execution Plan Generator
=============================================

Splits one large trade intent into an ordered sequence of sized,
time-spaced sub-orders that resist pattern detection.

Algorithm:
    1. Draw chunk sizes from a mode-dependent distribution, clamped
       to [min_chunk, max_chunk] and rounded to 2 decimals
    2. Close out with a final chunk holding whatever remains
    3. Shuffle the normal chunks, final chunk always last
    4. Assign multimodal human-like delays in execution order

Modes:
    stealth:    f = 0.5*U1 + 0.3*U2 + 0.2*U3
                size = min + (min(max, 0.3 * remaining) - min) * f
    aggressive: size = min + (max - min) * U^(1 - 0.7)

Every random draw goes through the injected RNG's random() method, so
a seeded random.Random or a scripted stub makes plans reproducible.

Author: GHOST Development Team
Version: 1.0.0
"""

import logging
import math
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import numpy as np

from .constants import (
    AGGRESSIVE_BIAS,
    AMOUNT_DECIMALS,
    HUMAN_VARIANCE_PATTERNS,
    MAX_CHUNK_ITERATIONS,
    MS_PER_MINUTE,
    MS_PER_SECOND,
    STEALTH_BLEND_WEIGHTS,
    STEALTH_REMAINING_CAP,
)
from .exceptions import InvalidOrderError, InvalidSettingsError

logger = logging.getLogger("GHOST_PlanGenerator")


class StealthMode(str, Enum):
    """Chunking and timing policy."""

    STEALTH = "stealth"
    AGGRESSIVE = "aggressive"

    @classmethod
    def parse(cls, value: Any) -> "StealthMode":
        """Parse a mode name, raising InvalidSettingsError when unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidSettingsError(
                f"Unknown stealth mode: {value!r}", field_name="mode"
            ) from None


# Accepted input keys -> field names (camelCase keys come from the UI)
_SETTINGS_ALIASES = {
    "min_chunk": "min_chunk",
    "minChunk": "min_chunk",
    "max_chunk": "max_chunk",
    "maxChunk": "max_chunk",
    "min_delay_seconds": "min_delay_seconds",
    "min_delay": "min_delay_seconds",
    "minDelay": "min_delay_seconds",
    "minDelaySeconds": "min_delay_seconds",
    "max_delay_seconds": "max_delay_seconds",
    "max_delay": "max_delay_seconds",
    "maxDelay": "max_delay_seconds",
    "maxDelaySeconds": "max_delay_seconds",
    "mode": "mode",
}


@dataclass(frozen=True)
class StealthSettings:
    """
    Immutable settings for one planning call.

    Bounds are validated on construction: chunk bounds and the delay
    ceiling must be strictly positive, the delay floor may be zero.
    """

    min_chunk: float = 25.0
    max_chunk: float = 100.0
    min_delay_seconds: float = 30.0
    max_delay_seconds: float = 180.0
    mode: StealthMode = StealthMode.STEALTH

    def __post_init__(self):
        object.__setattr__(self, "mode", StealthMode.parse(self.mode))
        self.validate()

    def validate(self) -> None:
        """Raise InvalidSettingsError if any bound is malformed."""
        for name in ("min_chunk", "max_chunk", "min_delay_seconds", "max_delay_seconds"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidSettingsError(
                    f"{name} must be a number, got {value!r}", field_name=name
                )
            if not np.isfinite(value):
                raise InvalidSettingsError(f"{name} must be finite", field_name=name)

        if self.min_chunk <= 0:
            raise InvalidSettingsError("min_chunk must be > 0", field_name="min_chunk")
        if self.max_chunk <= 0:
            raise InvalidSettingsError("max_chunk must be > 0", field_name="max_chunk")
        # Normal chunks are rounded to cents, so bounds must be whole cents
        for name in ("min_chunk", "max_chunk"):
            value = getattr(self, name)
            if round(value, AMOUNT_DECIMALS) != value:
                raise InvalidSettingsError(
                    f"{name} must be a multiple of 0.01, got {value!r}",
                    field_name=name,
                )
        if self.max_chunk < self.min_chunk:
            raise InvalidSettingsError(
                f"max_chunk ({self.max_chunk}) must be >= min_chunk ({self.min_chunk})",
                field_name="max_chunk",
            )
        if self.min_delay_seconds < 0:
            raise InvalidSettingsError(
                "min_delay_seconds must be >= 0", field_name="min_delay_seconds"
            )
        if self.max_delay_seconds <= 0:
            raise InvalidSettingsError(
                "max_delay_seconds must be > 0", field_name="max_delay_seconds"
            )
        if self.max_delay_seconds < self.min_delay_seconds:
            raise InvalidSettingsError(
                f"max_delay_seconds ({self.max_delay_seconds}) must be >= "
                f"min_delay_seconds ({self.min_delay_seconds})",
                field_name="max_delay_seconds",
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StealthSettings":
        """
        Build settings from a plain record.

        Accepts snake_case keys and the UI's camelCase keys
        (minChunk, maxChunk, minDelay, maxDelay, mode). Unknown keys
        are ignored; missing keys take the defaults.
        """
        values: Dict[str, Any] = {}
        for key, value in data.items():
            field_name = _SETTINGS_ALIASES.get(key)
            if field_name is None:
                logger.debug(f"Ignoring unknown settings key: {key}")
                continue
            if field_name == "mode":
                values[field_name] = StealthMode.parse(value)
                continue
            try:
                values[field_name] = float(value)
            except (TypeError, ValueError):
                raise InvalidSettingsError(
                    f"{field_name} must be a number, got {value!r}",
                    field_name=field_name,
                ) from None
        return cls(**values)

    def with_overrides(self, **changes: Any) -> "StealthSettings":
        """Return a validated copy with some fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "min_chunk": self.min_chunk,
            "max_chunk": self.max_chunk,
            "min_delay_seconds": self.min_delay_seconds,
            "max_delay_seconds": self.max_delay_seconds,
            "mode": self.mode.value,
        }


class ChunkKind(str, Enum):
    """Chunk role inside a plan."""

    NORMAL = "normal"
    FINAL = "final"


@dataclass(frozen=True)
class Chunk:
    """One sub-unit of the total amount, before timing is assigned."""

    amount: float
    kind: ChunkKind = ChunkKind.NORMAL


@dataclass(frozen=True)
class ExecutionStep:
    """A chunk scheduled at a position in the plan."""

    amount: float
    delay_ms: int
    sequence_index: int
    kind: ChunkKind = ChunkKind.NORMAL

    @property
    def delay_seconds(self) -> float:
        """Wait before this step, relative to the previous step settling."""
        return self.delay_ms / MS_PER_SECOND

    @property
    def is_final(self) -> bool:
        return self.kind == ChunkKind.FINAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "order": self.sequence_index,
            "amount": round(self.amount, AMOUNT_DECIMALS),
            "delay_ms": self.delay_ms,
            "delay_seconds": self.delay_seconds,
            "type": self.kind.value,
        }


@dataclass(frozen=True)
class ExecutionPlan:
    """Ordered, immutable execution plan for one trade intent."""

    total_amount: float
    steps: Tuple[ExecutionStep, ...]
    estimated_duration_minutes: float
    settings: StealthSettings

    @property
    def step_count(self) -> int:
        return len(self.steps)

    @property
    def final_step(self) -> ExecutionStep:
        return self.steps[-1]

    @property
    def total_delay_ms(self) -> int:
        return sum(step.delay_ms for step in self.steps)

    def preview(self) -> Dict[str, Any]:
        """Summary shown before committing to execution."""
        return {
            "total_amount": self.total_amount,
            "steps": self.step_count,
            "min_chunk": self.settings.min_chunk,
            "max_chunk": self.settings.max_chunk,
            "avg_chunk": round(self.total_amount / self.step_count, AMOUNT_DECIMALS),
            "estimated_duration_minutes": self.estimated_duration_minutes,
            "mode": self.settings.mode.value,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_amount": self.total_amount,
            "chunks": [step.to_dict() for step in self.steps],
            "estimated_duration_minutes": self.estimated_duration_minutes,
            "settings": self.settings.to_dict(),
        }


class PlanGenerator:
    """
    Stealth execution plan generator.

    Example:
        generator = PlanGenerator(rng=random.Random(7))
        plan = generator.generate_plan(
            1000.0,
            StealthSettings(min_chunk=25, max_chunk=100, mode="stealth"),
        )
        for step in plan.steps:
            print(step.sequence_index, step.amount, step.delay_seconds)
    """

    def __init__(self, rng: Optional[Any] = None):
        # Anything exposing random() -> float in [0, 1)
        self._rng = rng if rng is not None else random.Random()

    def generate_plan(
        self,
        total_amount: float,
        settings: Union[StealthSettings, Mapping[str, Any]],
    ) -> ExecutionPlan:
        """
        Generate a complete execution plan.

        Args:
            total_amount: Total amount to trade (> 0)
            settings: Stealth settings (or a plain record of them)

        Returns:
            ExecutionPlan whose step amounts sum to total_amount

        Raises:
            InvalidOrderError: total_amount is not a positive finite number
            InvalidSettingsError: settings bounds are malformed
        """
        if not isinstance(settings, StealthSettings):
            settings = StealthSettings.from_dict(settings)
        settings.validate()
        self._validate_amount(total_amount)

        chunks = self.shuffle_chunks(self.generate_chunks(total_amount, settings))
        delays = self.generate_delays(len(chunks), settings)

        steps = tuple(
            ExecutionStep(
                amount=chunk.amount,
                delay_ms=delay,
                sequence_index=index + 1,
                kind=chunk.kind,
            )
            for index, (chunk, delay) in enumerate(zip(chunks, delays))
        )

        plan = ExecutionPlan(
            total_amount=float(total_amount),
            steps=steps,
            estimated_duration_minutes=self.estimate_duration_minutes(delays),
            settings=settings,
        )

        logger.info(
            f"Plan generated: {total_amount} in {plan.step_count} steps, "
            f"~{plan.estimated_duration_minutes} min, "
            f"avg chunk {total_amount / plan.step_count:.2f} ({settings.mode.value})"
        )
        return plan

    def generate_chunks(
        self, total_amount: float, settings: StealthSettings
    ) -> List[Chunk]:
        """
        Partition total_amount into chunks in generation order.

        The last chunk is always FINAL and holds the exact remainder.
        """
        chunks: List[Chunk] = []
        remaining = float(total_amount)

        for iteration in range(MAX_CHUNK_ITERATIONS):
            if remaining <= settings.min_chunk:
                break

            candidate = self.draw_chunk_size(remaining, settings)
            candidate = round(candidate, AMOUNT_DECIMALS)
            candidate = max(settings.min_chunk, min(candidate, settings.max_chunk))

            # Last permitted iteration closes the plan
            if (
                remaining - candidate < settings.min_chunk
                or iteration == MAX_CHUNK_ITERATIONS - 1
            ):
                break

            chunks.append(Chunk(amount=candidate, kind=ChunkKind.NORMAL))
            remaining -= candidate
            logger.debug(f"Chunk {len(chunks)}: {candidate} (remaining {remaining:.2f})")

        chunks.append(Chunk(amount=remaining, kind=ChunkKind.FINAL))
        return chunks

    def draw_chunk_size(self, remaining: float, settings: StealthSettings) -> float:
        """Draw an unclamped candidate chunk size for the given mode."""
        if settings.mode == StealthMode.AGGRESSIVE:
            span = settings.max_chunk - settings.min_chunk
            return settings.min_chunk + span * self._rng.random() ** (1 - AGGRESSIVE_BIAS)

        w1, w2, w3 = STEALTH_BLEND_WEIGHTS
        factor = (
            self._rng.random() * w1
            + self._rng.random() * w2
            + self._rng.random() * w3
        )
        ceiling = min(settings.max_chunk, remaining * STEALTH_REMAINING_CAP)
        return settings.min_chunk + (ceiling - settings.min_chunk) * factor

    def shuffle_chunks(self, chunks: List[Chunk]) -> List[Chunk]:
        """Fisher-Yates shuffle of normal chunks; the final chunk stays last."""
        normal = [chunk for chunk in chunks if chunk.kind == ChunkKind.NORMAL]
        final = [chunk for chunk in chunks if chunk.kind == ChunkKind.FINAL]

        for i in range(len(normal) - 1, 0, -1):
            j = int(self._rng.random() * (i + 1))
            normal[i], normal[j] = normal[j], normal[i]

        return normal + final

    def generate_delays(self, count: int, settings: StealthSettings) -> List[int]:
        """Delays in milliseconds; the first step executes immediately."""
        if count <= 0:
            return []
        return [0] + [self.draw_delay_ms(settings) for _ in range(count - 1)]

    def draw_delay_ms(self, settings: StealthSettings) -> int:
        """Uniform base delay scaled by a human-like variance factor."""
        min_ms = settings.min_delay_seconds * MS_PER_SECOND
        max_ms = settings.max_delay_seconds * MS_PER_SECOND
        base = min_ms + self._rng.random() * (max_ms - min_ms)
        return int(round(base * self.human_variance()))

    def human_variance(self) -> float:
        """Pick quick, normal or slow response timing with equal odds."""
        index = min(
            int(self._rng.random() * len(HUMAN_VARIANCE_PATTERNS)),
            len(HUMAN_VARIANCE_PATTERNS) - 1,
        )
        low, width = HUMAN_VARIANCE_PATTERNS[index]
        return low + self._rng.random() * width

    @staticmethod
    def estimate_duration_minutes(delays: List[int]) -> float:
        """Sum of delays in minutes, one decimal, half rounded up."""
        return math.floor(sum(delays) / MS_PER_MINUTE * 10 + 0.5) / 10

    @staticmethod
    def _validate_amount(total_amount: float) -> None:
        if isinstance(total_amount, bool) or not isinstance(total_amount, (int, float)):
            raise InvalidOrderError(f"total_amount must be a number, got {total_amount!r}")
        if not np.isfinite(total_amount) or total_amount <= 0:
            raise InvalidOrderError(f"total_amount must be > 0, got {total_amount}")


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "StealthMode",
    "StealthSettings",
    "ChunkKind",
    "Chunk",
    "ExecutionStep",
    "ExecutionPlan",
    "PlanGenerator",
]
