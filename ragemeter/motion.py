"""Frame-synchronous smoothing of the meter value."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Optional

from .gradient import clamp_score

__all__ = ["MotionSmoother", "MotionState"]


@dataclass(frozen=True)
class MotionState:
    """Result of one smoothing step.

    ``value`` is what the host should display (breathing included);
    ``accumulator`` is the un-breathed value that actually converges.
    """

    value: float
    is_moving: bool
    accumulator: float


class MotionSmoother:
    """Exponential approach towards the target score, one step per frame.

    The step is not normalised by the elapsed time: at 120 Hz the value
    converges twice as fast in wall-clock time as at 60 Hz. Hosts relying on a
    given feel should drive the smoother at a fixed frame interval.
    """

    def __init__(
        self,
        initial: float = 0.0,
        *,
        rate: float = 0.1,
        tolerance: float = 0.1,
        breathing: bool = False,
        breath_period_ms: float = 800.0,
        breath_amplitude: float = 0.8,
    ) -> None:
        self.rate = rate
        self.tolerance = tolerance
        self.breathing = bool(breathing)
        self.breath_period_ms = float(breath_period_ms)
        self.breath_amplitude = float(breath_amplitude)
        self._value = clamp_score(initial)
        self._is_moving = False
        self._start_time = time.perf_counter()

    @property
    def rate(self) -> float:
        return self._rate

    @rate.setter
    def rate(self, value: float) -> None:
        value = float(value)
        if not 0.0 < value <= 1.0:
            raise ValueError(f"smoothing rate must be in (0, 1], got {value}")
        self._rate = value

    @property
    def tolerance(self) -> float:
        return self._tolerance

    @tolerance.setter
    def tolerance(self, value: float) -> None:
        value = float(value)
        if not value >= 0.0:
            raise ValueError(f"tolerance must be non-negative, got {value}")
        self._tolerance = value

    @property
    def now_ms(self) -> float:
        return (time.perf_counter() - self._start_time) * 1000.0

    @property
    def accumulator(self) -> float:
        return self._value

    @property
    def is_moving(self) -> bool:
        return self._is_moving

    def reset(self, value: float = 0.0) -> None:
        self._value = clamp_score(value)
        self._is_moving = False
        self._start_time = time.perf_counter()

    def _breath(self, now_ms: float) -> float:
        if not self.breathing or self.breath_period_ms <= 0:
            return 0.0
        return math.sin(now_ms / self.breath_period_ms) * self.breath_amplitude

    def tick(self, target: float, now_ms: Optional[float] = None) -> MotionState:
        target = clamp_score(target)
        diff = target - self._value
        self._is_moving = abs(diff) > self.tolerance
        if self._is_moving:
            self._value += diff * self.rate
        else:
            self._value = target
        if now_ms is None:
            now_ms = self.now_ms
        reported = clamp_score(self._value + self._breath(now_ms))
        return MotionState(reported, self._is_moving, self._value)
