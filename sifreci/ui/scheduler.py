"""QTimer-backed scheduler for the progression controller."""

from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer


class QtScheduledTask:
    def __init__(self, timer: QTimer) -> None:
        self._timer: Optional[QTimer] = timer

    @property
    def active(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    def cancel(self) -> None:
        if self._timer is None:
            return
        self._timer.stop()
        self._timer.deleteLater()
        self._timer = None

    def _finished(self) -> None:
        if self._timer is not None:
            self._timer.deleteLater()
            self._timer = None


class QtScheduler:
    """Schedules one-shot callbacks on the Qt event loop.

    Timers are parented to ``owner`` so they die with the widget that owns the game.
    """

    def __init__(self, owner: QObject) -> None:
        self._owner = owner

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> QtScheduledTask:
        timer = QTimer(self._owner)
        timer.setSingleShot(True)
        task = QtScheduledTask(timer)

        def on_timeout() -> None:
            task._finished()
            callback()

        timer.timeout.connect(on_timeout)
        timer.start(max(0, int(delay_ms)))
        return task
