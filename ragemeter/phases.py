"""Narrative phases and the per-zone ancillary formulas.

Two independent discretisations of the score live here:

* the three narrative phases (``SIMMER``/``AGITATION``/``RAGE``) computed from
  the *raw* score so the breathing term of the smoother can never make the
  phase flicker;
* the five colour zones (idle, 2–35, 35–55, 55–75, 75–100) which drive noise
  opacity, distortion and the status label.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Tuple

from .gradient import clamp_score

__all__ = [
    "Phase",
    "PhaseInfo",
    "classify",
    "zone_for",
    "noise_opacity",
    "distortion_scale",
    "rotation_period_ms",
    "status_label",
    "shadow_intensity",
    "pulse_active",
    "reticle_rotation_deg",
    "PULSE_PERIOD_MS",
]


AGITATION_THRESHOLD = 30.0
RAGE_THRESHOLD = 70.0

ZONE_BOUNDS = (35.0, 55.0, 75.0)
CRITICAL_THRESHOLD = 90.0
PULSE_PERIOD_MS = 2500.0

_ROTATION_SLOWEST_MS = 15000.0
_ROTATION_RANGE_MS = 14200.0


class Phase(enum.IntEnum):
    SIMMER = 1
    AGITATION = 2
    RAGE = 3

    @property
    def rank(self) -> int:
        return int(self)


@dataclass(frozen=True)
class PhaseInfo:
    phase: Phase
    label: str
    title: str
    ticker_messages: Tuple[str, ...]

    @property
    def rank(self) -> int:
        return self.phase.rank

    def ticker_message(self, index: int) -> str:
        """Return the ticker entry for a rotating display; the list is cyclic."""

        return self.ticker_messages[index % len(self.ticker_messages)]


_PHASE_COPY = {
    Phase.SIMMER: PhaseInfo(
        Phase.SIMMER,
        "SIMMERING",
        "WAKING THE GIANT",
        ("COMPETITORS IDENTIFIED", "KEYWORDS TARGETED"),
    ),
    Phase.AGITATION: PhaseInfo(
        Phase.AGITATION,
        "AGITATED",
        "THEY KNOW YOU'RE HERE",
        ("RANKINGS GAINED", "VISIBILITY DROPPING"),
    ),
    Phase.RAGE: PhaseInfo(
        Phase.RAGE,
        "ENRAGED",
        "COMPETITOR PANIC",
        ("AUTHORITY SCORE: MAX", "TRAFFIC HIJACKED"),
    ),
}


def classify(raw_score: float) -> PhaseInfo:
    """Return the narrative phase for ``raw_score``.

    Boundaries are exclusive on the lower side: 30 is still ``SIMMER`` and 70
    is still ``AGITATION``.
    """

    score = clamp_score(raw_score)
    if score > RAGE_THRESHOLD:
        return _PHASE_COPY[Phase.RAGE]
    if score > AGITATION_THRESHOLD:
        return _PHASE_COPY[Phase.AGITATION]
    return _PHASE_COPY[Phase.SIMMER]


def zone_for(score: float, idle_threshold: float = 2.0) -> int:
    score = clamp_score(score)
    if score < idle_threshold:
        return 0
    for zone, upper in enumerate(ZONE_BOUNDS, start=1):
        if score <= upper:
            return zone
    return 4


def _zone_factor(score: float, lower: float, upper: float) -> float:
    return (score - lower) / (upper - lower)


def noise_opacity(score: float, idle_threshold: float = 2.0) -> float:
    score = clamp_score(score)
    zone = zone_for(score, idle_threshold)
    if zone == 2:
        return 0.08 + _zone_factor(score, 35.0, 55.0) * 0.05
    if zone == 3:
        return 0.05
    if zone == 4:
        return 0.05 + _zone_factor(score, 75.0, 100.0) * 0.05
    return 0.03


def distortion_scale(score: float) -> float:
    """Heat-haze displacement: 0 up to 75, then a linear ramp to 4 at 100."""

    score = clamp_score(score)
    if score <= ZONE_BOUNDS[-1]:
        return 0.0
    return _zone_factor(score, 75.0, 100.0) * 4.0


def rotation_period_ms(score: float) -> float:
    return _ROTATION_SLOWEST_MS - clamp_score(score) / 100.0 * _ROTATION_RANGE_MS


def status_label(score: float, idle_threshold: float = 2.0) -> str:
    score = clamp_score(score)
    zone = zone_for(score, idle_threshold)
    if zone == 0:
        return "IDLE"
    if zone <= 2:
        return "INITIATING"
    if score > CRITICAL_THRESHOLD:
        return "CRITICAL"
    return "ACTIVE"


def shadow_intensity(score: float) -> float:
    return clamp_score(score) / 100.0


def pulse_active(score: float) -> bool:
    return clamp_score(score) > CRITICAL_THRESHOLD


def reticle_rotation_deg(score: float) -> float:
    """Rotation of the orbital dial reticle; its counter ring turns at -0.5x."""

    return clamp_score(score) * 2.4
