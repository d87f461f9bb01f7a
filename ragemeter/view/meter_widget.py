"""Raster ``QWidget`` painting one meter from the engine's frame output.

The widget is a thin consumer: it owns a :class:`RageEngine` and a
:class:`FrameDriver`, forwards the slider value to the engine and paints the
last :class:`FrameState` it received.
"""

from __future__ import annotations

import math
from typing import Mapping, Optional

from PyQt5 import QtCore, QtGui, QtWidgets

from ..engine import FrameState, RageEngine
from .frame_driver import FrameDriver

__all__ = ["MeterWidget"]


_HOUSING_COLOR = QtGui.QColor(255, 255, 255, 13)
_TEXT_MUTED = QtGui.QColor(140, 140, 140)
_PARTICLE_ALPHA = {"mist": 0.35, "spark": 0.9, "plasma": 0.7}


def _qcolor(frame: FrameState, alpha: float = 1.0) -> QtGui.QColor:
    r, g, b = frame.color.as_tuple()
    color = QtGui.QColor(r, g, b)
    color.setAlphaF(max(0.0, min(1.0, alpha)))
    return color


class MeterWidget(QtWidgets.QWidget):
    """Circular meter: glow, dashed turbine ring, progress arc and particles."""

    def __init__(
        self,
        variant: str = "indicator",
        parent: Optional[QtWidgets.QWidget] = None,
        *,
        params: Optional[Mapping[str, object]] = None,
        seed: Optional[int] = None,
    ) -> None:
        super().__init__(parent)
        self.setAttribute(QtCore.Qt.WA_OpaquePaintEvent, False)
        self.setMinimumSize(160, 160)
        self.engine = RageEngine(variant, params, seed=seed)
        self._frame: Optional[FrameState] = None
        self._spin_deg = 0.0
        self._last_ms: Optional[float] = None
        interval = self.engine.state["system"]["frameIntervalMs"]
        self.driver = FrameDriver(self.engine, self, interval_ms=interval)
        self.driver.frameReady.connect(self._on_frame)
        self.driver.start()

    # ------------------------------------------------------------------ API
    @QtCore.pyqtSlot(int)
    def set_score(self, score: int) -> None:
        self.engine.set_score(float(score))

    def set_params(self, payload: Mapping[str, object]) -> None:
        self.engine.set_params(payload)
        self.driver.set_interval(self.engine.state["system"]["frameIntervalMs"])
        self.driver.start()

    def dispose(self) -> None:
        self.driver.dispose()

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # type: ignore[override]
        self.dispose()
        super().closeEvent(event)

    # ------------------------------------------------------------ frame loop
    def _on_frame(self, frame: FrameState) -> None:
        now = self.engine.now_ms
        if self._last_ms is not None and frame.visuals.rotation_period_ms > 0:
            self._spin_deg = (self._spin_deg + 360.0 * (now - self._last_ms) / frame.visuals.rotation_period_ms) % 360.0
        self._last_ms = now
        self._frame = frame
        self.update()

    # -------------------------------------------------------------- painting
    def paintEvent(self, event: QtGui.QPaintEvent) -> None:  # type: ignore[override]
        del event
        frame = self._frame
        if frame is None:
            return
        painter = QtGui.QPainter(self)
        try:
            self._render_with_painter(painter, frame)
        finally:
            painter.end()

    def _render_with_painter(self, painter: QtGui.QPainter, frame: FrameState) -> None:
        painter.setRenderHint(QtGui.QPainter.Antialiasing, True)
        width = max(1, self.width())
        height = max(1, self.height())
        cx = width / 2.0
        cy = height / 2.0
        if frame.shake:
            t = self.engine.now_ms
            cx += math.sin(t * 0.09) * 3.0
            cy += math.cos(t * 0.11) * 2.0
        radius = min(width, height) * 0.38
        idle = frame.visuals.zone == 0

        glow = self.engine.state["meter"]["glowOpacity"]
        if frame.flare:
            glow = min(1.0, glow * 2.0)
        if not idle:
            gradient = QtGui.QRadialGradient(QtCore.QPointF(cx, cy), radius * 1.4)
            gradient.setColorAt(0.0, _qcolor(frame, glow))
            gradient.setColorAt(1.0, _qcolor(frame, 0.0))
            painter.setPen(QtCore.Qt.NoPen)
            painter.setBrush(QtGui.QBrush(gradient))
            painter.drawEllipse(QtCore.QPointF(cx, cy), radius * 1.4, radius * 1.4)

        painter.setBrush(QtCore.Qt.NoBrush)
        painter.setPen(QtGui.QPen(_HOUSING_COLOR if idle else _qcolor(frame, 0.2), 1.0))
        painter.drawEllipse(QtCore.QPointF(cx, cy), radius * 1.1, radius * 1.1)

        # turbine ring
        painter.save()
        painter.translate(cx, cy)
        painter.rotate(self._spin_deg)
        pen = QtGui.QPen(_qcolor(frame, 0.3), 1.0, QtCore.Qt.DashLine)
        painter.setPen(pen)
        painter.drawEllipse(QtCore.QPointF(0.0, 0.0), radius * 1.02, radius * 1.02)
        painter.restore()

        # progress arc, clockwise from twelve o'clock
        rect = QtCore.QRectF(cx - radius, cy - radius, radius * 2.0, radius * 2.0)
        pen = QtGui.QPen(_qcolor(frame), max(2.0, radius * 0.14), QtCore.Qt.SolidLine, QtCore.Qt.FlatCap)
        pen.setDashPattern([2.0, 1.0])
        painter.setPen(pen)
        painter.drawArc(rect, 90 * 16, int(-frame.smoothed * 3.6 * 16))

        painter.setPen(QtCore.Qt.NoPen)
        for particle in frame.particles:
            color = _qcolor(frame, _PARTICLE_ALPHA.get(particle.kind, 0.6))
            painter.setBrush(color)
            # unit-ring angle 0 is twelve o'clock, clockwise
            rad = math.radians(particle.angle_deg - 90.0)
            dist = math.hypot(particle.x, particle.y) * radius
            px = cx + math.cos(rad) * dist
            py = cy + math.sin(rad) * dist
            size = particle.descriptor.size
            painter.drawEllipse(QtCore.QPointF(px, py), size, size)

        font = QtGui.QFont(self.font())
        font.setBold(True)
        font.setPointSizeF(max(8.0, radius * 0.42))
        painter.setFont(font)
        painter.setPen(_qcolor(frame))
        painter.drawText(QtCore.QRectF(cx - radius, cy - radius * 0.6, radius * 2.0, radius * 0.9),
                         QtCore.Qt.AlignCenter, str(int(round(frame.smoothed))))

        font.setPointSizeF(max(6.0, radius * 0.09))
        painter.setFont(font)
        painter.setPen(_TEXT_MUTED)
        painter.drawText(QtCore.QRectF(cx - radius, cy + radius * 0.3, radius * 2.0, radius * 0.3),
                         QtCore.Qt.AlignCenter, frame.visuals.status_label)
