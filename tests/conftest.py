"""Shared fixtures for the meter engine tests."""

import os

import pytest

from ragemeter.engine import RageEngine
from ragemeter.gradient import ColorGradientResolver, DIAL_STOPS, INDICATOR_STOPS


@pytest.fixture()
def indicator_resolver():
    return ColorGradientResolver(INDICATOR_STOPS, idle_threshold=2.0)


@pytest.fixture()
def dial_resolver():
    return ColorGradientResolver(DIAL_STOPS, idle_threshold=5.0)


@pytest.fixture()
def engine():
    """Indicator engine without breathing so smoothed values are exact."""
    return RageEngine("indicator", {"meter": {"breathing": False}}, seed=7)


@pytest.fixture(autouse=True)
def _quiet_debug(monkeypatch):
    monkeypatch.delenv("RAGEMETER_DEBUG", raising=False)


@pytest.fixture(scope="session")
def qapp():
    """One QApplication for every Qt test, on the offscreen platform."""
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    QtWidgets = pytest.importorskip("PyQt5.QtWidgets")
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([])
    return app
