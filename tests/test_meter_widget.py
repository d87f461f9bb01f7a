"""Paint tests for the meter widget on the offscreen platform."""

import pytest

pytest.importorskip("PyQt5.QtWidgets")

from ragemeter.phases import Phase  # noqa: E402
from ragemeter.view.meter_widget import MeterWidget  # noqa: E402


@pytest.fixture()
def widget(qapp):
    # interval 0 keeps the timer idle; frames are stepped by hand
    widget = MeterWidget(
        "indicator",
        params={"meter": {"breathing": False}, "system": {"frameIntervalMs": 0}},
        seed=5,
    )
    widget.resize(200, 200)
    yield widget
    widget.dispose()
    widget.deleteLater()


def _paint(widget):
    pixmap = widget.grab()
    assert not pixmap.isNull()
    assert (pixmap.width(), pixmap.height()) == (200, 200)
    return pixmap.toImage()


def test_timer_stays_idle_with_zero_interval(widget):
    assert not widget.driver.is_running()


def test_paints_idle_meter(widget):
    frame = widget.driver.step()
    assert frame.visuals.zone == 0
    assert widget._frame is frame
    _paint(widget)


@pytest.mark.parametrize(
    "score, phase",
    [(20, Phase.SIMMER), (50, Phase.AGITATION), (95, Phase.RAGE)],
)
def test_paints_each_phase_with_particles(widget, score, phase):
    widget.engine.set_score(score)
    frame = widget.driver.step()
    assert frame.phase is phase
    assert frame.is_moving and frame.particles
    _paint(widget)


def test_paints_shake_and_flare(widget):
    widget.set_score(80)
    frame = widget.driver.step()
    assert frame.shake and frame.flare
    image = _paint(widget)
    assert not image.isNull()
