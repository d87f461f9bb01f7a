"""QTimer based frame loop for :class:`ragemeter.engine.RageEngine`."""

from __future__ import annotations

from typing import Optional

from PyQt5 import QtCore

from ..engine import FrameState, RageEngine

__all__ = ["FrameDriver"]


class FrameDriver(QtCore.QObject):
    """Call ``engine.tick()`` on every timer timeout and publish the frame.

    The driver is the only writer of the engine's motion state. ``dispose()``
    withdraws the scheduled timer for good, so a torn-down widget never
    receives another frame even if a timeout was already queued.
    """

    frameReady = QtCore.pyqtSignal(object)

    def __init__(
        self,
        engine: RageEngine,
        parent: Optional[QtCore.QObject] = None,
        *,
        interval_ms: int = 16,
    ) -> None:
        super().__init__(parent)
        self.engine = engine
        self.last_frame: Optional[FrameState] = None
        self._disposed = False
        self._frame_interval_ms = max(int(interval_ms), 0)
        self._timer = QtCore.QTimer(self)
        self._timer.setTimerType(QtCore.Qt.PreciseTimer)
        self._timer.timeout.connect(self._on_timeout)

    @property
    def interval_ms(self) -> int:
        return self._frame_interval_ms

    @property
    def disposed(self) -> bool:
        return self._disposed

    def is_running(self) -> bool:
        return self._timer.isActive()

    def start(self) -> None:
        if self._disposed or self._frame_interval_ms <= 0:
            return
        if not self._timer.isActive():
            self._timer.start(self._frame_interval_ms)

    def stop(self) -> None:
        if self._timer.isActive():
            self._timer.stop()

    def dispose(self) -> None:
        self.stop()
        self._disposed = True

    def set_interval(self, interval_ms: int) -> None:
        """Update the refresh interval; zero or less pauses the loop."""

        interval_ms = max(int(interval_ms), 0)
        if interval_ms == self._frame_interval_ms and self._timer.isActive() == (interval_ms > 0):
            return
        self._frame_interval_ms = interval_ms
        if interval_ms <= 0:
            self.stop()
            return
        if self._timer.isActive():
            self._timer.setInterval(interval_ms)

    def step(self) -> Optional[FrameState]:
        """Advance one frame by hand; returns ``None`` once disposed."""

        if self._disposed:
            return None
        frame = self.engine.tick()
        self.last_frame = frame
        self.frameReady.emit(frame)
        return frame

    def _on_timeout(self) -> None:
        self.step()
