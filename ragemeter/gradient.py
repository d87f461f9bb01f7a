"""Piecewise colour gradient used by the meter and the input dials.

Stops are written with the same ``#hex@pos`` notation the control config uses,
except that positions are expressed on the score scale (0–100) rather than
0–1.  The resolver validates the table once, at construction, so that
interpolation itself can never fail.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

__all__ = [
    "Color",
    "ColorStop",
    "ColorGradientResolver",
    "GradientConfigError",
    "IDLE_COLOR",
    "INDICATOR_STOPS",
    "DIAL_STOPS",
    "clamp_score",
    "parse_color_stops",
]


INDICATOR_STOPS = "#525252@2,#22D3EE@35,#FFE600@55,#FF6F2E@75,#FF2F2F@100"
DIAL_STOPS = "#525252@5,#FFE600@35,#22D3EE@55,#FF6F2E@75,#FF2F2F@100"


class GradientConfigError(ValueError):
    """Raised when a colour stop table cannot be used for interpolation."""


def clamp_score(value: float) -> float:
    """Clamp ``value`` to the 0–100 score range.

    NaN has no meaningful position on the scale and is treated as 0.
    """

    value = float(value)
    if math.isnan(value):
        return 0.0
    return max(0.0, min(100.0, value))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class Color:
    """An RGB colour with integer channels in ``[0, 255]``."""

    r: int
    g: int
    b: int

    @classmethod
    def from_hex(cls, value: str) -> "Color":
        raw = value.strip().lstrip("#")
        if len(raw) == 3:
            raw = "".join(ch * 2 for ch in raw)
        if len(raw) != 6:
            raise GradientConfigError(f"invalid colour {value!r}")
        try:
            number = int(raw, 16)
        except ValueError as exc:
            raise GradientConfigError(f"invalid colour {value!r}") from exc
        return cls((number >> 16) & 255, (number >> 8) & 255, number & 255)

    def hex(self) -> str:
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"

    def as_tuple(self) -> Tuple[int, int, int]:
        return self.r, self.g, self.b

    def mix(self, other: "Color", factor: float) -> "Color":
        """Linearly blend each channel towards ``other``."""

        return Color(
            _round_half_up(self.r + factor * (other.r - self.r)),
            _round_half_up(self.g + factor * (other.g - self.g)),
            _round_half_up(self.b + factor * (other.b - self.b)),
        )


IDLE_COLOR = Color.from_hex("#525252")


@dataclass(frozen=True)
class ColorStop:
    threshold: float
    color: Color


def parse_color_stops(value: str) -> List[ColorStop]:
    """Parse ``"#hex@threshold,#hex@threshold,..."`` into colour stops.

    Unlike the appearance gradient parser, missing positions are not
    distributed automatically: every stop of a score gradient must carry an
    explicit threshold.
    """

    if not value or not value.strip():
        raise GradientConfigError("empty colour stop list")
    stops: List[ColorStop] = []
    for part in (chunk.strip() for chunk in value.split(",")):
        if not part:
            continue
        if "@" not in part:
            raise GradientConfigError(f"stop {part!r} has no threshold")
        color, pos = part.split("@", 1)
        try:
            threshold = float(pos)
        except ValueError as exc:
            raise GradientConfigError(f"stop {part!r} has an invalid threshold") from exc
        stops.append(ColorStop(threshold, Color.from_hex(color)))
    return stops


def _validate_stops(stops: Sequence[ColorStop], idle_threshold: float) -> None:
    if len(stops) < 2:
        raise GradientConfigError("a gradient needs at least two stops")
    previous: Optional[float] = None
    for stop in stops:
        if not 0.0 <= stop.threshold <= 100.0:
            raise GradientConfigError(f"threshold {stop.threshold} outside 0-100")
        if previous is not None and stop.threshold <= previous:
            raise GradientConfigError("stop thresholds must be strictly increasing")
        previous = stop.threshold
    if stops[0].threshold > idle_threshold:
        raise GradientConfigError(
            f"first stop ({stops[0].threshold}) leaves a gap above the idle threshold ({idle_threshold})"
        )
    if stops[-1].threshold < 100.0:
        raise GradientConfigError(f"last stop ({stops[-1].threshold}) does not reach 100")


class ColorGradientResolver:
    """Map a score onto the configured stop table.

    Parameters
    ----------
    stops:
        Either a ``#hex@threshold`` string or a sequence of :class:`ColorStop`.
    idle_threshold:
        Scores strictly below this value resolve to ``idle_color``. The primary
        indicator uses 2, the input dials use 5.
    idle_color:
        Colour returned for idle scores.
    """

    def __init__(
        self,
        stops: str | Sequence[ColorStop] = INDICATOR_STOPS,
        *,
        idle_threshold: float = 2.0,
        idle_color: Color = IDLE_COLOR,
    ) -> None:
        parsed = parse_color_stops(stops) if isinstance(stops, str) else list(stops)
        self.idle_threshold = float(idle_threshold)
        _validate_stops(parsed, self.idle_threshold)
        self.stops: Tuple[ColorStop, ...] = tuple(parsed)
        self.idle_color = idle_color

    def resolve(self, score: float) -> Color:
        score = clamp_score(score)
        if score < self.idle_threshold:
            return self.idle_color
        for start, end in zip(self.stops, self.stops[1:]):
            if start.threshold <= score <= end.threshold:
                factor = (score - start.threshold) / (end.threshold - start.threshold)
                return start.color.mix(end.color, factor)
        return self.stops[-1].color
