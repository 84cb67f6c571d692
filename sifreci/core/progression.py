"""Level and streak progression for the cipher game."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, List, Optional

from sifreci.core.cipher import Round, RoundGenerator, SelectionResult, resolve_selection
from sifreci.core.scheduling import ScheduledTask, Scheduler
from sifreci.core.session import PlaySession
from sifreci.core.settings import GameSettings

logger = logging.getLogger(__name__)


class Feedback(Enum):
    NONE = "none"
    SUCCESS = "success"
    LEVEL_UP = "level_up"
    ERROR = "error"

    @property
    def correct(self) -> bool:
        return self in (Feedback.SUCCESS, Feedback.LEVEL_UP)


def _noop(*_args) -> None:
    return None


class ProgressionController:
    """Drives rounds for one play session.

    Each resolved round moves the session through these transitions
    (``threshold`` is ``settings.advance_threshold``):

    * correct below the top level, streak still under ``threshold``:
      streak + 1, success feedback, new round after ``success_delay_ms``
    * correct below the top level, streak reaches ``threshold``:
      level + 1 and streak 0 right away, level-up feedback, then after
      ``level_up_delay_ms`` the level change is announced with a new round
    * correct at the top level: streak 0, success feedback, new round after
      ``success_delay_ms``
    * wrong: streak 0, error feedback cleared after ``error_delay_ms``; the
      same round stays on screen

    Selections are ignored while feedback is showing. ``close()`` cancels
    every pending callback.
    """

    def __init__(
        self,
        session: PlaySession,
        generator: RoundGenerator,
        scheduler: Scheduler,
        settings: Optional[GameSettings] = None,
        *,
        on_round_ready: Optional[Callable[[Round], None]] = None,
        on_feedback: Optional[Callable[[Feedback], None]] = None,
        on_level_changed: Optional[Callable[[int], None]] = None,
        on_win: Optional[Callable[[], None]] = None,
    ) -> None:
        self._session = session
        self._generator = generator
        self._scheduler = scheduler
        self._settings = settings or GameSettings()
        self._on_round_ready = on_round_ready or _noop
        self._on_feedback = on_feedback or _noop
        self._on_level_changed = on_level_changed or _noop
        self._on_win = on_win or _noop

        self._round: Optional[Round] = None
        self._feedback = Feedback.NONE
        self._pending: List[ScheduledTask] = []
        self._closed = False

    @property
    def session(self) -> PlaySession:
        return self._session

    @property
    def round(self) -> Optional[Round]:
        return self._round

    @property
    def feedback(self) -> Feedback:
        return self._feedback

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def accepting_input(self) -> bool:
        return not self._closed and self._round is not None and self._feedback is Feedback.NONE

    @property
    def pending_tasks(self) -> int:
        return len(self._pending)

    def start(self) -> Round:
        """Show the first round at the session's current level."""
        if self._closed:
            raise RuntimeError("ProgressionController is closed")
        self._cancel_pending()
        self._feedback = Feedback.NONE
        return self._new_round()

    def select(self, index: int) -> Optional[SelectionResult]:
        """Resolve the player's choice. Returns None when the selection was ignored."""
        if not self.accepting_input:
            logger.debug("Ignoring selection %r (feedback=%s)", index, self._feedback.value)
            return None

        result = resolve_selection(self._round, index)
        if result.correct:
            self._handle_correct()
        else:
            self._handle_incorrect()
        return result

    def close(self) -> None:
        """Tear down: cancel pending callbacks and ignore later events."""
        if self._closed:
            return
        self._closed = True
        self._cancel_pending()
        logger.debug("Progression closed at level %d", self._session.level)

    def _handle_correct(self) -> None:
        session = self._session
        streak = session.record_correct()
        self._on_win()

        if session.level >= self._generator.max_level:
            session.streak = 0
            self._show_feedback(Feedback.SUCCESS)
            self._schedule(self._settings.success_delay_ms, self._next_round)
        elif streak >= self._settings.advance_threshold:
            new_level = session.advance_level()
            logger.info("Level up: %d -> %d", new_level - 1, new_level)
            self._show_feedback(Feedback.LEVEL_UP)
            self._schedule(self._settings.level_up_delay_ms, lambda: self._enter_level(new_level))
        else:
            self._show_feedback(Feedback.SUCCESS)
            self._schedule(self._settings.success_delay_ms, self._next_round)

    def _handle_incorrect(self) -> None:
        self._session.record_incorrect()
        self._show_feedback(Feedback.ERROR)
        self._schedule(self._settings.error_delay_ms, self._clear_feedback)

    def _show_feedback(self, feedback: Feedback) -> None:
        self._feedback = feedback
        logger.debug(
            "Feedback %s (level=%d, streak=%d)",
            feedback.value,
            self._session.level,
            self._session.streak,
        )
        self._on_feedback(feedback)

    def _clear_feedback(self) -> None:
        self._show_feedback(Feedback.NONE)

    def _enter_level(self, level: int) -> None:
        self._on_level_changed(level)
        self._next_round()

    def _next_round(self) -> None:
        self._clear_feedback()
        self._new_round()

    def _new_round(self) -> Round:
        self._round = self._generator.generate(self._session.level)
        self._on_round_ready(self._round)
        return self._round

    def _schedule(self, delay_ms: int, callback: Callable[[], None]) -> None:
        holder: List[ScheduledTask] = []
        fired = False

        def fire() -> None:
            nonlocal fired
            fired = True
            if holder:
                self._pending[:] = [t for t in self._pending if t is not holder[0]]
            if self._closed:
                return
            callback()

        task = self._scheduler.call_later(delay_ms, fire)
        holder.append(task)
        # A scheduler may run the callback before call_later returns.
        if not fired:
            self._pending.append(task)

    def _cancel_pending(self) -> None:
        for task in self._pending:
            task.cancel()
        self._pending.clear()
