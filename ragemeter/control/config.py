import copy
import math
from typing import Mapping, Optional

from ..gradient import DIAL_STOPS, INDICATOR_STOPS
from ..particles import MAX_PARTICLE_COUNT

VARIANTS = ("indicator", "dial")

DEFAULTS = dict(
    indicator=dict(
        colors=INDICATOR_STOPS, idleThreshold=2.0, idleColor="#525252",
        breathing=True, smoothing=0.1, tolerance=0.1,
        breathPeriodMs=800.0, breathAmplitude=0.8, glowOpacity=0.35,
    ),
    dial=dict(
        colors=DIAL_STOPS, idleThreshold=5.0, idleColor="#525252",
        breathing=False, smoothing=0.1, tolerance=0.1,
        breathPeriodMs=800.0, breathAmplitude=0.8, glowOpacity=0.25,
    ),
    effects=dict(shakeMs=500.0, flareMs=800.0),
    particles=dict(count=30),
    system=dict(frameIntervalMs=16),
)

SHARED_SECTIONS = ("effects", "particles", "system")

TOOLTIPS = {
    "meter.colors": "Paliers de couleur #hex@seuil, du seuil le plus bas jusqu’à 100.",
    "meter.idleThreshold": "En dessous de ce score, la jauge reste grise (2 pour l’indicateur, 5 pour les molettes).",
    "meter.idleColor": "Couleur affichée tant que le score reste sous le seuil de repos.",
    "meter.breathing": "Ajoute une légère respiration sinusoïdale à la valeur affichée.",
    "meter.smoothing": "Fraction de l’écart rattrapée à chaque image.",
    "meter.tolerance": "Écart en dessous duquel la jauge est considérée immobile.",
    "meter.breathPeriodMs": "Période de la respiration (ms par radian).",
    "meter.breathAmplitude": "Amplitude de la respiration, en points de score.",
    "meter.glowOpacity": "Opacité du halo derrière la jauge.",
    "effects.shakeMs": "Durée du tremblement déclenché à chaque montée de phase.",
    "effects.flareMs": "Durée de l’éclat lumineux déclenché à chaque montée de phase.",
    "particles.count": "Nombre de particules tirées une seule fois à la création.",
    "system.frameIntervalMs": "Intervalle entre deux images ; 0 met l’animation en pause.",
}


def _coerce_float(value: object, default: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if math.isfinite(result) else default


# numbers outside these ranges fall back to the default
_VALID_RANGES = {
    "smoothing": lambda v: 0.0 < v <= 1.0,
    "tolerance": lambda v: v >= 0.0,
    "count": lambda v: 1 <= v <= MAX_PARTICLE_COUNT,
}


def _sanitize_section(defaults: Mapping[str, object], payload: object) -> dict:
    section = copy.deepcopy(dict(defaults))
    if not isinstance(payload, Mapping):
        return section
    for key, value in payload.items():
        if key not in section:
            continue
        current = section[key]
        if isinstance(current, bool):
            if isinstance(value, str):
                section[key] = value.strip().lower() in {"1", "true", "yes", "on"}
            else:
                section[key] = bool(value)
        elif isinstance(current, (int, float)):
            number = _coerce_float(value, float(current))
            if key in _VALID_RANGES and not _VALID_RANGES[key](number):
                number = current
            section[key] = type(current)(number)
        elif isinstance(value, str) and value.strip():
            section[key] = value.strip()
    return section


def meter_config(variant: str = "indicator", payload: Optional[Mapping[str, object]] = None) -> dict:
    """Return the sanitized configuration for one meter variant.

    ``payload`` may override the variant section (under ``"meter"`` or under
    the variant's own name) and the shared ``effects``/``particles``/``system``
    sections. Unknown keys are ignored and junk numbers fall back to defaults;
    colour stops are validated later, when the gradient is built.
    """

    if variant not in VARIANTS:
        raise ValueError(f"unknown meter variant {variant!r}; expected one of {VARIANTS}")
    payload = payload if isinstance(payload, Mapping) else {}
    overrides = payload.get("meter", payload.get(variant))
    config = {"variant": variant, "meter": _sanitize_section(DEFAULTS[variant], overrides)}
    for name in SHARED_SECTIONS:
        config[name] = _sanitize_section(DEFAULTS[name], payload.get(name))
    return config
