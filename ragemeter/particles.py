"""Particle batch emitted from the moving tip of the meter."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from .gradient import clamp_score
from .phases import Phase

__all__ = [
    "ActiveParticle",
    "DEFAULT_PARTICLE_COUNT",
    "MAX_PARTICLE_COUNT",
    "PARTICLE_STYLES",
    "ParticleDescriptor",
    "ParticleEmitter",
    "ParticleStyle",
]


DEFAULT_PARTICLE_COUNT = 30
MAX_PARTICLE_COUNT = 512
DEGREES_PER_POINT = 3.6


@dataclass(frozen=True)
class ParticleDescriptor:
    """Random seeds drawn once per emitter."""

    id: int
    angle_seed: float
    radius_seed: float
    delay: float
    size: float


@dataclass(frozen=True)
class ParticleStyle:
    kind: str
    min_duration: float
    max_duration: float
    spread_deg: float
    jitter: float


PARTICLE_STYLES: Dict[Phase, ParticleStyle] = {
    # slow drifting haze
    Phase.SIMMER: ParticleStyle("mist", 1.0, 2.0, 40.0, 0.25),
    Phase.AGITATION: ParticleStyle("spark", 0.1, 0.3, 16.0, 0.08),
    Phase.RAGE: ParticleStyle("plasma", 0.4, 0.8, 28.0, 0.15),
}


@dataclass(frozen=True)
class ActiveParticle:
    """A descriptor rendered for the current phase and tip position.

    ``x``/``y`` are offsets on a unit ring centred on the meter; the host
    scales them to its own radius.
    """

    descriptor: ParticleDescriptor
    kind: str
    duration: float
    angle_deg: float
    x: float
    y: float

    @property
    def id(self) -> int:
        return self.descriptor.id

    def as_dict(self) -> dict:
        return {
            "id": self.descriptor.id,
            "kind": self.kind,
            "duration": self.duration,
            "delay": self.descriptor.delay,
            "size": self.descriptor.size,
            "angleDeg": self.angle_deg,
            "x": self.x,
            "y": self.y,
        }


def _rand_for_index(index: int, salt: int = 0) -> float:
    s = index * 12.9898 + salt * 78.233
    x = math.sin(s) * 43758.5453
    return x - math.floor(x)


class ParticleEmitter:
    """Fixed batch of particles whose style follows the current phase.

    The batch is drawn at construction and reused for the lifetime of the
    emitter, including across phase changes, so the spatial distribution stays
    put while only the animation style changes.
    """

    def __init__(self, count: int = DEFAULT_PARTICLE_COUNT, *, seed: Optional[int] = None) -> None:
        count = int(count)
        if not 1 <= count <= MAX_PARTICLE_COUNT:
            raise ValueError(f"particle count must be in 1..{MAX_PARTICLE_COUNT}, got {count}")
        rng = random.Random(seed)
        self.descriptors: Tuple[ParticleDescriptor, ...] = tuple(
            ParticleDescriptor(
                id=idx,
                angle_seed=rng.random(),
                radius_seed=rng.random(),
                delay=rng.random(),
                size=1.0 + rng.random() * 2.0,
            )
            for idx in range(count)
        )

    def __len__(self) -> int:
        return len(self.descriptors)

    def _render(self, descriptor: ParticleDescriptor, phase: Phase, tip_deg: float) -> ActiveParticle:
        style = PARTICLE_STYLES[phase]
        span = style.max_duration - style.min_duration
        duration = style.min_duration + span * _rand_for_index(descriptor.id, phase.rank)
        angle = tip_deg + (descriptor.angle_seed - 0.5) * style.spread_deg
        radius = 1.0 + (descriptor.radius_seed - 0.5) * 2.0 * style.jitter
        rad = math.radians(angle)
        return ActiveParticle(
            descriptor=descriptor,
            kind=style.kind,
            duration=duration,
            angle_deg=angle,
            x=math.cos(rad) * radius,
            y=math.sin(rad) * radius,
        )

    def active_particles(self, phase: Phase, is_moving: bool, smoothed_score: float) -> Iterator[ActiveParticle]:
        """Yield the batch rendered for ``phase``; nothing while motion is idle."""

        if not is_moving:
            return
        phase = Phase(phase)
        tip_deg = clamp_score(smoothed_score) * DEGREES_PER_POINT
        for descriptor in self.descriptors:
            yield self._render(descriptor, phase, tip_deg)

    def snapshot(self, phase: Phase, is_moving: bool, smoothed_score: float) -> List[ActiveParticle]:
        return list(self.active_particles(phase, is_moving, smoothed_score))
