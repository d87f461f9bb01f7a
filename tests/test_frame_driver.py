"""Tests for the QTimer frame loop."""

import pytest

QtCore = pytest.importorskip("PyQt5.QtCore")

from ragemeter.engine import RageEngine  # noqa: E402
from ragemeter.view.frame_driver import FrameDriver  # noqa: E402


@pytest.fixture()
def driver(qapp):
    engine = RageEngine("indicator", {"meter": {"breathing": False}}, seed=3)
    driver = FrameDriver(engine, interval_ms=5)
    yield driver
    driver.dispose()


def _spin(qapp, ms):
    loop = QtCore.QEventLoop()
    QtCore.QTimer.singleShot(ms, loop.quit)
    loop.exec_()


def test_start_and_stop(driver):
    assert not driver.is_running()
    driver.start()
    assert driver.is_running()
    driver.stop()
    assert not driver.is_running()


def test_timer_ticks_the_engine(qapp, driver):
    frames = []
    driver.frameReady.connect(frames.append)
    driver.engine.set_score(80)
    driver.start()
    _spin(qapp, 100)
    driver.stop()
    assert frames
    assert frames[-1].smoothed > 0.0
    assert driver.last_frame is frames[-1]


def test_dispose_withdraws_future_frames(qapp, driver):
    frames = []
    driver.frameReady.connect(frames.append)
    driver.start()
    driver.dispose()
    assert not driver.is_running()
    assert driver.step() is None
    driver.start()
    assert not driver.is_running()
    _spin(qapp, 30)
    assert frames == []


def test_zero_interval_pauses(driver):
    driver.start()
    driver.set_interval(0)
    assert not driver.is_running()
    assert driver.interval_ms == 0
    driver.start()
    assert not driver.is_running()


def test_manual_step_emits(driver):
    frames = []
    driver.frameReady.connect(frames.append)
    frame = driver.step()
    assert frames == [frame]
