"""Qt implementation of the engine's display-refresh clock."""

from __future__ import annotations

from typing import Callable, Hashable

from PySide6.QtCore import QObject, QTimer

from ..config import FRAME_INTERVAL_MS


class QtFrameClock(QObject):
    """Run the scheduled render callback from a single-shot ``QTimer``.

    The render scheduler always cancels before it requests a new frame, so
    one timer is enough: restarting it replaces the previous callback.
    """

    def __init__(self, parent: QObject | None = None, *, interval_ms: int = FRAME_INTERVAL_MS) -> None:
        super().__init__(parent)
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._fire)
        self._callback: Callable[[], None] | None = None
        self._generation = 0

    # ------------------------------------------------------------------
    def request_frame(self, callback: Callable[[], None]) -> int:
        self._generation += 1
        self._callback = callback
        self._timer.start()
        return self._generation

    # ------------------------------------------------------------------
    def cancel_frame(self, token: Hashable) -> None:
        if token != self._generation:
            return
        self._timer.stop()
        self._callback = None

    # ------------------------------------------------------------------
    def _fire(self) -> None:
        callback, self._callback = self._callback, None
        if callback is not None:
            callback()


__all__ = ["QtFrameClock"]
