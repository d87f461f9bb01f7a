"""End-to-end tests for the per-widget engine."""

import json

import pytest

from ragemeter.engine import RageEngine, derive_visuals
from ragemeter.gradient import GradientConfigError, IDLE_COLOR
from ragemeter.phases import Phase
from ragemeter.transitions import UP


def _run(engine, frames, start_ms=16.0, step_ms=16.0):
    return [engine.tick(start_ms + i * step_ms) for i in range(frames)]


def test_jump_reports_rage_immediately_and_smooths_gradually(engine):
    event = engine.set_score(80, now_ms=0.0)
    assert event.occurred and event.direction == UP
    assert (event.from_rank, event.to_rank) == (1, 3)

    frames = _run(engine, 200)
    assert all(f.phase is Phase.RAGE for f in frames)
    assert frames[0].smoothed == pytest.approx(8.0)
    assert all(f.smoothed < 80.0 for f in frames[:10])
    smoothed = [f.smoothed for f in frames]
    assert smoothed == sorted(smoothed)
    assert frames[-1].smoothed == 80.0

    emitted = [f.transition for f in frames if f.transition.occurred]
    assert len(emitted) == 1
    assert frames[0].transition.visible


def test_visuals_follow_the_smoothed_value(engine):
    engine.set_score(80, now_ms=0.0)
    frame = engine.tick(16.0)
    assert frame.color == engine.resolver.resolve(8.0)
    assert frame.visuals.distortion_scale == 0.0
    assert frame.visuals.rotation_period_ms == pytest.approx(15000 - 8.0 / 100 * 14200)


def test_shake_and_flare_clear_themselves(engine):
    engine.set_score(50, now_ms=0.0)
    frame = engine.tick(16.0)
    assert frame.shake and frame.flare
    frame = engine.tick(600.0)
    assert not frame.shake and frame.flare
    frame = engine.tick(900.0)
    assert not frame.shake and not frame.flare


def test_downward_change_is_silent(engine):
    engine.set_score(80, now_ms=0.0)
    engine.tick(16.0)
    event = engine.set_score(10, now_ms=32.0)
    assert not event.occurred
    frame = engine.tick(48.0)
    assert not frame.transition.occurred
    assert frame.phase is Phase.SIMMER


def test_particles_only_while_moving(engine):
    engine.set_score(60, now_ms=0.0)
    frames = _run(engine, 200)
    assert len(frames[0].particles) == 30
    assert {p.kind for p in frames[0].particles} == {"spark"}
    assert frames[-1].particles == ()
    assert not frames[-1].is_moving


def test_frame_is_json_ready(engine):
    engine.set_score(95, now_ms=0.0)
    payload = engine.tick(16.0).as_dict()
    decoded = json.loads(json.dumps(payload))
    assert decoded["phase"] == "RAGE"
    assert decoded["transition"]["direction"] == "up"
    assert decoded["color"].startswith("#")
    assert len(decoded["particles"]) == 30


def test_dial_variant_idles_below_five():
    engine = RageEngine("dial", seed=1)
    assert not engine.smoother.breathing
    engine.set_score(4, now_ms=0.0)
    frame = _run(engine, 200)[-1]
    assert frame.smoothed == 4.0
    assert frame.color == IDLE_COLOR
    assert frame.visuals.status_label == "IDLE"
    assert frame.visuals.zone == 0


def test_indicator_breathes_by_default():
    engine = RageEngine("indicator", seed=1, initial_score=50)
    assert engine.smoother.breathing
    values = {round(engine.tick(t).smoothed, 3) for t in (0.0, 400.0, 1200.0, 2000.0)}
    assert len(values) > 1
    assert all(49.2 <= v <= 50.8 for v in values)


def test_invalid_gradient_keeps_previous_config(engine):
    before = engine.state["meter"]["colors"]
    resolver = engine.resolver
    with pytest.raises(GradientConfigError):
        engine.set_params({"meter": {"colors": "#000000@50,#FFFFFF@20"}})
    assert engine.state["meter"]["colors"] == before
    assert engine.resolver is resolver


def test_failed_particle_rebuild_keeps_previous_config(engine, monkeypatch):
    def refuse(count, seed=None):
        raise ValueError("no particles")

    monkeypatch.setattr("ragemeter.engine.ParticleEmitter", refuse)
    resolver = engine.resolver
    emitter = engine.emitter
    with pytest.raises(ValueError):
        engine.set_params(
            {
                "particles": {"count": 12},
                "meter": {"idleThreshold": 1.5, "colors": "#525252@1.5,#FF2F2F@100", "smoothing": 0.5},
            }
        )
    assert engine.resolver is resolver
    assert engine.emitter is emitter
    assert engine.state["meter"]["idleThreshold"] == 2.0
    assert engine.state["particles"]["count"] == 30
    assert engine.smoother.rate == 0.1


def test_out_of_range_settings_keep_defaults(engine):
    engine.set_params({"particles": {"count": 0}, "meter": {"smoothing": 2.5}})
    assert len(engine.emitter) == 30
    engine.set_score(100, now_ms=0.0)
    frames = _run(engine, 200)
    assert all(0.0 <= f.smoothed <= 100.0 for f in frames)
    assert [f.smoothed for f in frames] == sorted(f.smoothed for f in frames)
    assert not frames[-1].is_moving


def test_set_params_rebuilds_particles_and_timers(engine):
    engine.set_params({"particles": {"count": 12}, "effects": {"shakeMs": 100}})
    assert len(engine.emitter) == 12
    engine.set_score(50, now_ms=0.0)
    assert not engine.tick(150.0).shake


def test_reset_keeps_the_particle_batch(engine):
    descriptors = engine.emitter.descriptors
    engine.set_score(80, now_ms=0.0)
    engine.tick(16.0)
    engine.reset_visual_state()
    assert engine.emitter.descriptors is descriptors
    assert engine.smoother.accumulator == 80.0
    assert engine.detector.rank == 3


def test_engines_are_independent():
    first = RageEngine("indicator", {"meter": {"breathing": False}}, seed=1)
    second = RageEngine("indicator", {"meter": {"breathing": False}}, seed=1)
    first.set_score(90, now_ms=0.0)
    first.tick(16.0)
    frame = second.tick(16.0)
    assert frame.smoothed == 0.0
    assert frame.phase is Phase.SIMMER


def test_derive_visuals_is_pure(indicator_resolver):
    assert derive_visuals(63.5, indicator_resolver) == derive_visuals(63.5, indicator_resolver)


def test_unknown_variant_is_rejected():
    with pytest.raises(ValueError):
        RageEngine("gauge")


def test_debug_lines_are_opt_in(engine, monkeypatch, capsys):
    engine.set_score(50, now_ms=0.0)
    assert capsys.readouterr().out == ""
    monkeypatch.setenv("RAGEMETER_DEBUG", "1")
    engine.set_score(90, now_ms=10.0)
    assert "[RageMeter][DEBUG]" in capsys.readouterr().out


def test_escalations_between_frames_merge(engine):
    engine.set_score(50, now_ms=0.0)
    engine.set_score(90, now_ms=4.0)
    frame = engine.tick(16.0)
    assert frame.transition.visible
    assert (frame.transition.from_rank, frame.transition.to_rank) == (1, 3)
    assert not engine.tick(32.0).transition.occurred


def test_escalation_after_a_drop_keeps_the_first_rank(engine):
    engine.set_score(50, now_ms=0.0)
    engine.set_score(10, now_ms=4.0)
    engine.set_score(90, now_ms=8.0)
    transition = engine.tick(16.0).transition
    assert (transition.from_rank, transition.to_rank) == (1, 3)
