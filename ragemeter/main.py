# -*- coding: utf-8 -*-
"""Demo window: one slider feeding the primary meter and two input dials."""

import sys
from typing import List, NoReturn, Optional


def _handle_qt_import_error(exc: ImportError) -> NoReturn:
    """Exit with a helpful message when the Qt bindings cannot be imported."""

    message_lines = [
        "Unable to start the RageMeter demo: importing PyQt5 failed.",
        "Check that PyQt5 is installed and that the system Qt libraries are available.",
    ]
    if "libGL.so.1" in str(exc):
        message_lines.append("Hint: the system library libGL.so.1 is missing; install the Mesa/OpenGL packages.")
    message_lines.append(f"Original error: {exc}")
    raise SystemExit("\n".join(message_lines)) from exc


try:
    from PyQt5 import QtCore, QtWidgets
    from PyQt5.QtCore import Qt
except ImportError as exc:  # pragma: no cover - depends on the environment
    _handle_qt_import_error(exc)

from .phases import PhaseInfo, classify
from .view.meter_widget import MeterWidget

TICKER_INTERVAL_MS = 2500


class DemoWindow(QtWidgets.QWidget):
    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("RageMeter")
        self.setStyleSheet("background: #0A0A0A; color: #D4D4D4;")
        self._ticker_index = 0
        self._phase: PhaseInfo = classify(0)

        self.title = QtWidgets.QLabel(self._phase.title)
        self.title.setAlignment(Qt.AlignCenter)
        self.ticker = QtWidgets.QLabel(self._phase.ticker_message(0))
        self.ticker.setAlignment(Qt.AlignCenter)

        self.primary = MeterWidget("indicator", self)
        self.primary.setMinimumSize(280, 280)
        self.dials: List[MeterWidget] = [MeterWidget("dial", self) for _ in range(2)]

        meters = QtWidgets.QHBoxLayout()
        meters.addWidget(self.dials[0], 1)
        meters.addWidget(self.primary, 2)
        meters.addWidget(self.dials[1], 1)

        self.slider = QtWidgets.QSlider(Qt.Horizontal)
        self.slider.setRange(0, 100)
        self.slider.valueChanged.connect(self._on_score)

        layout = QtWidgets.QVBoxLayout(self)
        layout.addWidget(self.title)
        layout.addWidget(self.ticker)
        layout.addLayout(meters, 1)
        layout.addWidget(self.slider)

        self._ticker_timer = QtCore.QTimer(self)
        self._ticker_timer.timeout.connect(self._rotate_ticker)
        self._ticker_timer.start(TICKER_INTERVAL_MS)

    def _on_score(self, value: int) -> None:
        self.primary.set_score(value)
        for dial in self.dials:
            dial.set_score(value)
        phase = classify(value)
        if phase.phase != self._phase.phase:
            self._phase = phase
            self._ticker_index = 0
            self.title.setText(phase.title)
            self.ticker.setText(phase.ticker_message(0))

    def _rotate_ticker(self) -> None:
        self._ticker_index += 1
        self.ticker.setText(self._phase.ticker_message(self._ticker_index))

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._ticker_timer.stop()
        for meter in [self.primary, *self.dials]:
            meter.dispose()
        super().closeEvent(event)


def main(headless: bool = False) -> int:
    """Open the demo window.

    ``headless=True`` returns immediately without creating a QApplication so
    tests and importers can call it safely.
    """

    if headless:
        return 0
    app = QtWidgets.QApplication(sys.argv)
    window = DemoWindow()
    window.resize(900, 480)
    window.show()
    return app.exec_()


if __name__ == "__main__":
    sys.exit(main())
