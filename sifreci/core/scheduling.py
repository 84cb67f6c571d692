"""Deferred callbacks used by the progression controller."""

from __future__ import annotations

from typing import Callable, Protocol


class ScheduledTask(Protocol):
    def cancel(self) -> None:
        """Stop the callback from running. Safe to call more than once or after it ran."""


class Scheduler(Protocol):
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledTask:
        """Run ``callback`` once on the event loop after ``delay_ms`` milliseconds."""
