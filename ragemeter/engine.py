"""Per-widget engine combining the gradient, phases, motion and particles.

One :class:`RageEngine` drives exactly one meter. The host pushes the raw
score with :meth:`RageEngine.set_score` whenever its input changes and calls
:meth:`RageEngine.tick` once per animation frame; everything the renderer
needs for that frame comes back as a :class:`FrameState`.
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from .control.config import SHARED_SECTIONS, meter_config
from .gradient import Color, ColorGradientResolver, clamp_score
from .motion import MotionSmoother
from .particles import ActiveParticle, ParticleEmitter
from .phases import (
    Phase,
    classify,
    distortion_scale,
    noise_opacity,
    pulse_active,
    reticle_rotation_deg,
    rotation_period_ms,
    shadow_intensity,
    status_label,
    zone_for,
)
from .transitions import NO_TRANSITION, UP, PhaseTransitionDetector, TransitionEvent

__all__ = ["FrameState", "RageEngine", "VisualState", "derive_visuals"]


@dataclass(frozen=True)
class VisualState:
    """Everything derived from a single (smoothed) score."""

    color: Color
    rotation_period_ms: float
    noise_opacity: float
    distortion_scale: float
    zone: int
    status_label: str
    shadow_intensity: float
    pulse_active: bool
    reticle_rotation_deg: float


def derive_visuals(score: float, resolver: ColorGradientResolver) -> VisualState:
    """Compute the visual bundle for ``score``. Pure; safe to call at any time."""

    score = clamp_score(score)
    idle = resolver.idle_threshold
    return VisualState(
        color=resolver.resolve(score),
        rotation_period_ms=rotation_period_ms(score),
        noise_opacity=noise_opacity(score, idle),
        distortion_scale=distortion_scale(score),
        zone=zone_for(score, idle),
        status_label=status_label(score, idle),
        shadow_intensity=shadow_intensity(score),
        pulse_active=pulse_active(score),
        reticle_rotation_deg=reticle_rotation_deg(score),
    )


@dataclass(frozen=True)
class FrameState:
    score: float
    smoothed: float
    is_moving: bool
    visuals: VisualState
    phase: Phase
    label: str
    title: str
    ticker_messages: Tuple[str, ...]
    transition: TransitionEvent
    shake: bool
    flare: bool
    particles: Tuple[ActiveParticle, ...]

    @property
    def color(self) -> Color:
        return self.visuals.color

    def as_dict(self) -> dict:
        v = self.visuals
        return {
            "score": self.score,
            "smoothed": self.smoothed,
            "isMoving": self.is_moving,
            "color": v.color.hex(),
            "rotationPeriodMs": v.rotation_period_ms,
            "noiseOpacity": v.noise_opacity,
            "distortionScale": v.distortion_scale,
            "zone": v.zone,
            "statusLabel": v.status_label,
            "shadowIntensity": v.shadow_intensity,
            "pulseActive": v.pulse_active,
            "reticleRotationDeg": v.reticle_rotation_deg,
            "phase": self.phase.name,
            "label": self.label,
            "title": self.title,
            "tickerMessages": list(self.ticker_messages),
            "transition": self.transition.as_dict(),
            "shake": self.shake,
            "flare": self.flare,
            "particles": [p.as_dict() for p in self.particles],
        }


def _debug_enabled() -> bool:
    return os.environ.get("RAGEMETER_DEBUG", "").strip().lower() in {"1", "true", "yes"}


class RageEngine:
    """State owner for one meter instance.

    Parameters
    ----------
    variant:
        ``"indicator"`` for the primary meter (idle below 2, breathing) or
        ``"dial"`` for the input dials (idle below 5, no breathing).
    params:
        Optional overrides merged over :data:`ragemeter.control.config.DEFAULTS`.
    seed:
        Seed for the particle batch; ``None`` draws a fresh batch.
    """

    def __init__(
        self,
        variant: str = "indicator",
        params: Optional[Mapping[str, object]] = None,
        *,
        seed: Optional[int] = None,
        initial_score: float = 0.0,
    ) -> None:
        self.variant = variant
        self.state = meter_config(variant, params)
        self._seed = seed
        self._start_time = time.perf_counter()
        self.score = clamp_score(initial_score)
        self._pending: TransitionEvent = NO_TRANSITION
        self.resolver = self._build_resolver(self.state)
        meter = self.state["meter"]
        self.smoother = MotionSmoother(
            self.score,
            rate=meter["smoothing"],
            tolerance=meter["tolerance"],
            breathing=meter["breathing"],
            breath_period_ms=meter["breathPeriodMs"],
            breath_amplitude=meter["breathAmplitude"],
        )
        effects = self.state["effects"]
        self.detector = PhaseTransitionDetector(
            classify(self.score).rank,
            shake_ms=effects["shakeMs"],
            flare_ms=effects["flareMs"],
        )
        self.emitter = ParticleEmitter(self.state["particles"]["count"], seed=seed)

    # ------------------------------------------------------------------ helpers
    @property
    def now_ms(self) -> float:
        return (time.perf_counter() - self._start_time) * 1000.0

    def _debug(self, message: str) -> None:
        if _debug_enabled():
            print(f"[RageMeter][DEBUG] {self.variant}: {message}", flush=True)

    @staticmethod
    def _build_resolver(state: Mapping[str, dict]) -> ColorGradientResolver:
        meter = state["meter"]
        return ColorGradientResolver(
            meter["colors"],
            idle_threshold=meter["idleThreshold"],
            idle_color=Color.from_hex(meter["idleColor"]),
        )

    # ---------------------------------------------------------------- config
    def set_params(self, payload: Mapping[str, object]) -> None:
        """Merge a partial configuration and rebuild the affected parts.

        A malformed gradient or particle count raises before anything is
        replaced, leaving the engine on its previous configuration.
        """

        if not isinstance(payload, Mapping):
            return
        merged = {name: dict(self.state[name]) for name in ("meter",) + SHARED_SECTIONS}
        for key, value in payload.items():
            target = "meter" if key in ("meter", self.variant) else key
            if target in merged and isinstance(value, Mapping):
                merged[target].update(value)
        state = meter_config(self.variant, merged)
        resolver = self._build_resolver(state)
        emitter = self.emitter
        count = state["particles"]["count"]
        if count != len(emitter):
            emitter = ParticleEmitter(count, seed=self._seed)

        self.state = state
        self.resolver = resolver
        meter = state["meter"]
        self.smoother.rate = meter["smoothing"]
        self.smoother.tolerance = meter["tolerance"]
        self.smoother.breathing = meter["breathing"]
        self.smoother.breath_period_ms = meter["breathPeriodMs"]
        self.smoother.breath_amplitude = meter["breathAmplitude"]
        self.detector.shake.duration_ms = max(0.0, state["effects"]["shakeMs"])
        self.detector.flare.duration_ms = max(0.0, state["effects"]["flareMs"])
        self.emitter = emitter
        self._debug(f"configuration rebuilt ({', '.join(sorted(payload))})")

    def reset_visual_state(self) -> None:
        """Restart motion, effects and the clock; the particle batch is kept."""

        self._start_time = time.perf_counter()
        self.smoother.reset(self.score)
        self.detector.reset(classify(self.score).rank)
        self._pending = NO_TRANSITION

    # ------------------------------------------------------------------ frame
    def set_score(self, score: float, now_ms: Optional[float] = None) -> TransitionEvent:
        """Push a new raw score. Phase and transitions react immediately."""

        self.score = clamp_score(score)
        if now_ms is None:
            now_ms = self.now_ms
        event = self.detector.observe(classify(self.score).rank, now_ms)
        if event.visible:
            if self._pending.visible:
                # several escalations between two frames surface as one
                event = TransitionEvent(True, UP, self._pending.from_rank, event.to_rank)
            self._pending = event
            self._debug(f"phase up {event.from_rank} -> {event.to_rank} at score {self.score:.1f}")
        elif event.direction is not None:
            self._debug(f"phase down {event.from_rank} -> {event.to_rank} (silent)")
        return event

    def tick(self, now_ms: Optional[float] = None) -> FrameState:
        if now_ms is None:
            now_ms = self.now_ms
        motion = self.smoother.tick(self.score, now_ms)
        visuals = derive_visuals(motion.value, self.resolver)
        info = classify(self.score)
        transition, self._pending = self._pending, NO_TRANSITION
        particles = tuple(self.emitter.active_particles(info.phase, motion.is_moving, motion.value))
        return FrameState(
            score=self.score,
            smoothed=motion.value,
            is_moving=motion.is_moving,
            visuals=visuals,
            phase=info.phase,
            label=info.label,
            title=info.title,
            ticker_messages=info.ticker_messages,
            transition=transition,
            shake=self.detector.shake_active(now_ms),
            flare=self.detector.flare_active(now_ms),
            particles=particles,
        )
