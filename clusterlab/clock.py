"""Frame scheduling for running simulations.

The Qt timer ticks at display rate; :class:`FrameThrottle` decides which
ticks actually advance the engine, so the speed setting maps to
``1000 / speed`` milliseconds between steps.
"""

from __future__ import annotations

from typing import Optional

from PyQt5 import QtCore

__all__ = ["FrameThrottle", "AnimationClock", "FRAME_INTERVAL_MS"]

FRAME_INTERVAL_MS = 16


class FrameThrottle:
    def __init__(self, speed: int = 1) -> None:
        self.speed = max(1, int(speed))
        self._last: Optional[float] = None

    @property
    def interval_ms(self) -> float:
        return 1000.0 / self.speed

    def set_speed(self, speed: int) -> None:
        self.speed = max(1, int(speed))

    def ready(self, now_ms: float) -> bool:
        """True when more than one interval has passed since the last step."""

        if self._last is not None and now_ms - self._last <= self.interval_ms:
            return False
        self._last = now_ms
        return True

    def reset(self) -> None:
        self._last = None


class AnimationClock(QtCore.QObject):
    """Drive ``session.advance()`` while the session reports it is running."""

    def __init__(self, session, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self.session = session
        self.throttle = FrameThrottle(session.speed)
        self._elapsed = QtCore.QElapsedTimer()
        self._elapsed.start()
        self._timer = QtCore.QTimer(self)
        self._timer.setInterval(FRAME_INTERVAL_MS)
        self._timer.timeout.connect(self._on_frame)

    @property
    def active(self) -> bool:
        return self._timer.isActive()

    def sync(self, snapshot) -> None:
        """Start or cancel the timer so it mirrors ``snapshot.running``."""

        self.throttle.set_speed(snapshot.speed)
        if snapshot.running:
            if not self._timer.isActive():
                self.throttle.reset()
                self._timer.start()
        else:
            self.cancel()

    def cancel(self) -> None:
        if self._timer.isActive():
            self._timer.stop()

    def tick(self, now_ms: float) -> bool:
        """Run one frame at ``now_ms``; the engine advances at most once."""

        if not self.session.running:
            self.cancel()
            return False
        if not self.throttle.ready(now_ms):
            return False
        return self.session.advance()

    def _on_frame(self) -> None:
        self.tick(float(self._elapsed.elapsed()))
