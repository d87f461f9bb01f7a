"""Edge detection over the narrative phase rank.

Only escalation is dramatised: an upward rank change starts the shake and
flare effects, a downward change is recorded silently.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

__all__ = ["EffectTimer", "PhaseTransitionDetector", "TransitionEvent", "UP", "DOWN"]


UP = "up"
DOWN = "down"


@dataclass(frozen=True)
class TransitionEvent:
    """Outcome of one observation.

    A downward change keeps ``occurred`` false: the rank is tracked but
    nothing is emitted. ``direction`` still records it for diagnostics.
    """

    occurred: bool
    direction: Optional[str] = None
    from_rank: int = 0
    to_rank: int = 0

    @property
    def visible(self) -> bool:
        return self.occurred and self.direction == UP

    def as_dict(self) -> dict:
        return {
            "occurred": self.occurred,
            "direction": self.direction,
            "fromRank": self.from_rank,
            "toRank": self.to_rank,
        }


NO_TRANSITION = TransitionEvent(False)


class EffectTimer:
    """One-shot effect that clears itself ``duration_ms`` after the last trigger."""

    def __init__(self, duration_ms: float) -> None:
        self.duration_ms = max(0.0, float(duration_ms))
        self._started_ms: Optional[float] = None

    def trigger(self, now_ms: float) -> None:
        self._started_ms = float(now_ms)

    def remaining(self, now_ms: float) -> float:
        if self._started_ms is None:
            return 0.0
        return max(0.0, self._started_ms + self.duration_ms - now_ms)

    def is_active(self, now_ms: float) -> bool:
        return self.remaining(now_ms) > 0.0

    def clear(self) -> None:
        self._started_ms = None


class PhaseTransitionDetector:
    """Track the last seen phase rank and report changes.

    Parameters
    ----------
    initial_rank:
        Rank of the initial raw score; the first observation of that same rank
        does not count as a transition.
    shake_ms / flare_ms:
        Durations of the two effects started by an upward transition.
    """

    def __init__(self, initial_rank: int, *, shake_ms: float = 500.0, flare_ms: float = 800.0) -> None:
        self.rank = int(initial_rank)
        self.shake = EffectTimer(shake_ms)
        self.flare = EffectTimer(flare_ms)

    def observe(self, rank: int, now_ms: float) -> TransitionEvent:
        rank = int(rank)
        if rank == self.rank:
            return NO_TRANSITION
        previous, self.rank = self.rank, rank
        if rank < previous:
            return TransitionEvent(False, DOWN, previous, rank)
        self.shake.trigger(now_ms)
        self.flare.trigger(now_ms)
        return TransitionEvent(True, UP, previous, rank)

    def shake_active(self, now_ms: float) -> bool:
        return self.shake.is_active(now_ms)

    def flare_active(self, now_ms: float) -> bool:
        return self.flare.is_active(now_ms)

    def reset(self, rank: int) -> None:
        self.rank = int(rank)
        self.shake.clear()
        self.flare.clear()
