"""Tests for sifreci.core.progression – level/streak state machine."""

from __future__ import annotations

import random
from typing import Callable, List

import pytest

from sifreci.core.catalog import ContentCatalog
from sifreci.core.cipher import Round, RoundGenerator
from sifreci.core.errors import SelectionOutOfRangeError
from sifreci.core.levels import LevelRepository
from sifreci.core.progression import Feedback, ProgressionController
from sifreci.core.session import PlaySession
from sifreci.core.settings import GameSettings


# ---------------------------------------------------------------------------
# Manual scheduler
# ---------------------------------------------------------------------------

class _Task:
    def __init__(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self.delay_ms = delay_ms
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Collects callbacks and runs them only when the test says so."""

    def __init__(self) -> None:
        self.tasks: List[_Task] = []

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> _Task:
        task = _Task(delay_ms, callback)
        self.tasks.append(task)
        return task

    def pending(self) -> List[_Task]:
        return [t for t in self.tasks if not t.cancelled and not t.fired]

    def run_pending(self) -> None:
        for task in self.pending():
            task.fired = True
            task.callback()


class ImmediateScheduler:
    """Runs every callback inside call_later, before it returns."""

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> _Task:
        task = _Task(delay_ms, callback)
        task.fired = True
        callback()
        return task


class Recorder:
    def __init__(self) -> None:
        self.rounds: List[Round] = []
        self.feedback: List[Feedback] = []
        self.levels: List[int] = []
        self.wins = 0

    def win(self) -> None:
        self.wins += 1


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="module")
def content():
    return LevelRepository(), ContentCatalog()


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture()
def make_controller(content, scheduler, recorder):
    levels, catalog = content

    def _make(session: PlaySession = None, settings: GameSettings = None) -> ProgressionController:
        return ProgressionController(
            session or PlaySession(),
            RoundGenerator(levels, catalog, rng=random.Random(42)),
            scheduler,
            settings,
            on_round_ready=recorder.rounds.append,
            on_feedback=recorder.feedback.append,
            on_level_changed=recorder.levels.append,
            on_win=recorder.win,
        )

    return _make


def _answer(controller: ProgressionController, correct: bool):
    r = controller.round
    index = r.correct_index if correct else (r.correct_index + 1) % len(r.options)
    return controller.select(index)


# ---------------------------------------------------------------------------
# Start
# ---------------------------------------------------------------------------

class TestStart:
    def test_initial_state(self, make_controller):
        c = make_controller()
        assert (c.session.level, c.session.streak) == (1, 0)
        assert c.round is None
        assert c.feedback is Feedback.NONE
        assert not c.accepting_input

    def test_start_emits_round(self, make_controller, recorder):
        c = make_controller()
        r = c.start()
        assert recorder.rounds == [r]
        assert r.level == 1

    def test_session_seeded_from_first_level(self, make_controller, content):
        levels, _ = content
        c = make_controller(session=PlaySession(level=levels.first_level))
        assert c.start().level == levels.first_level
        assert c.accepting_input

    def test_start_uses_session_level(self, make_controller):
        c = make_controller(PlaySession(level=3))
        assert c.start().level == 3

    def test_select_before_start_ignored(self, make_controller):
        assert make_controller().select(0) is None


# ---------------------------------------------------------------------------
# Correct answers
# ---------------------------------------------------------------------------

class TestCorrect:
    def test_first_win_keeps_level(self, make_controller, recorder, scheduler):
        c = make_controller()
        c.start()
        result = _answer(c, correct=True)
        assert result.correct
        assert (c.session.level, c.session.streak) == (1, 1)
        assert c.feedback is Feedback.SUCCESS
        assert [t.delay_ms for t in scheduler.pending()] == [2500]

    def test_new_round_after_delay(self, make_controller, recorder, scheduler):
        c = make_controller()
        first = c.start()
        _answer(c, correct=True)
        assert len(recorder.rounds) == 1
        scheduler.run_pending()
        assert len(recorder.rounds) == 2
        assert c.round is recorder.rounds[-1]
        assert c.round is not first
        assert c.round.level == 1
        assert c.feedback is Feedback.NONE
        assert recorder.feedback == [Feedback.SUCCESS, Feedback.NONE]

    def test_two_wins_level_up(self, make_controller, recorder, scheduler):
        c = make_controller()
        c.start()
        _answer(c, correct=True)
        scheduler.run_pending()
        _answer(c, correct=True)
        assert (c.session.level, c.session.streak) == (2, 0)
        assert c.feedback is Feedback.LEVEL_UP
        assert recorder.levels == []
        assert [t.delay_ms for t in scheduler.pending()] == [1500]

        scheduler.run_pending()
        assert recorder.levels == [2]
        assert c.round.level == 2
        assert c.accepting_input

    def test_climb_to_top(self, make_controller, recorder, scheduler):
        c = make_controller()
        c.start()
        for _ in range(4):
            _answer(c, correct=True)
            scheduler.run_pending()
        assert recorder.levels == [2, 3]
        assert (c.session.level, c.session.streak) == (3, 0)

    def test_top_level_resets_streak_each_win(self, make_controller, recorder, scheduler):
        c = make_controller(PlaySession(level=3))
        c.start()
        for _ in range(3):
            _answer(c, correct=True)
            assert (c.session.level, c.session.streak) == (3, 0)
            assert c.feedback is Feedback.SUCCESS
            scheduler.run_pending()
        assert recorder.levels == []
        assert all(r.level == 3 for r in recorder.rounds)
        assert len(recorder.rounds) == 4

    def test_win_sink_every_correct(self, make_controller, recorder, scheduler):
        c = make_controller()
        c.start()
        _answer(c, correct=True)
        scheduler.run_pending()
        _answer(c, correct=True)
        scheduler.run_pending()
        _answer(c, correct=False)
        assert recorder.wins == 2

    def test_custom_threshold(self, make_controller, scheduler):
        c = make_controller(settings=GameSettings(advance_threshold=3))
        c.start()
        for _ in range(2):
            _answer(c, correct=True)
            scheduler.run_pending()
        assert (c.session.level, c.session.streak) == (1, 2)
        _answer(c, correct=True)
        assert c.session.level == 2


# ---------------------------------------------------------------------------
# Wrong answers
# ---------------------------------------------------------------------------

class TestIncorrect:
    def test_resets_streak_keeps_level(self, make_controller, scheduler):
        c = make_controller(PlaySession(level=2, streak=1))
        c.start()
        result = _answer(c, correct=False)
        assert result.correct is False
        assert (c.session.level, c.session.streak) == (2, 0)
        assert c.feedback is Feedback.ERROR
        assert [t.delay_ms for t in scheduler.pending()] == [1500]

    def test_same_round_stays(self, make_controller, recorder, scheduler):
        c = make_controller()
        first = c.start()
        _answer(c, correct=False)
        scheduler.run_pending()
        assert c.round is first
        assert recorder.rounds == [first]
        assert c.feedback is Feedback.NONE
        assert recorder.feedback == [Feedback.ERROR, Feedback.NONE]
        assert c.accepting_input

    def test_retry_after_error(self, make_controller, scheduler):
        c = make_controller()
        c.start()
        _answer(c, correct=False)
        scheduler.run_pending()
        assert _answer(c, correct=True).correct
        assert c.session.streak == 1


# ---------------------------------------------------------------------------
# Input guard
# ---------------------------------------------------------------------------

class TestInputGuard:
    def test_double_submission_ignored(self, make_controller, recorder):
        c = make_controller()
        c.start()
        _answer(c, correct=True)
        assert _answer(c, correct=True) is None
        assert c.session.streak == 1
        assert recorder.wins == 1

    def test_ignored_during_error_feedback(self, make_controller):
        c = make_controller()
        c.start()
        _answer(c, correct=False)
        assert c.select(c.round.correct_index) is None
        assert c.session.rounds_won == 0

    def test_out_of_range_rejected(self, make_controller):
        c = make_controller()
        c.start()
        with pytest.raises(SelectionOutOfRangeError):
            c.select(len(c.round.options))
        assert c.feedback is Feedback.NONE
        assert c.session.streak == 0


# ---------------------------------------------------------------------------
# Teardown
# ---------------------------------------------------------------------------

class TestClose:
    def test_close_cancels_pending(self, make_controller, scheduler, recorder):
        c = make_controller()
        c.start()
        _answer(c, correct=True)
        c.close()
        assert all(t.cancelled for t in scheduler.tasks)
        assert c.pending_tasks == 0
        scheduler.run_pending()
        assert len(recorder.rounds) == 1

    def test_late_callback_after_close_is_noop(self, make_controller, scheduler, recorder):
        c = make_controller()
        c.start()
        _answer(c, correct=True)
        _answer_task = scheduler.tasks[-1]
        c.close()
        _answer_task.callback()
        assert len(recorder.rounds) == 1
        assert c.feedback is Feedback.SUCCESS

    def test_level_up_not_announced_after_close(self, make_controller, scheduler, recorder):
        c = make_controller(PlaySession(streak=1))
        c.start()
        _answer(c, correct=True)
        c.close()
        scheduler.tasks[-1].callback()
        assert recorder.levels == []

    def test_selection_after_close_ignored(self, make_controller):
        c = make_controller()
        c.start()
        c.close()
        assert c.select(0) is None
        assert c.closed

    def test_start_after_close(self, make_controller):
        c = make_controller()
        c.close()
        with pytest.raises(RuntimeError):
            c.start()

    def test_close_twice(self, make_controller):
        c = make_controller()
        c.close()
        c.close()
        assert c.closed

    def test_fired_task_leaves_pending_list(self, make_controller, scheduler):
        c = make_controller()
        c.start()
        _answer(c, correct=False)
        assert c.pending_tasks == 1
        scheduler.run_pending()
        assert c.pending_tasks == 0

    def test_synchronous_scheduler_leaves_nothing_pending(self, content, recorder):
        levels, catalog = content
        c = ProgressionController(
            PlaySession(),
            RoundGenerator(levels, catalog, rng=random.Random(5)),
            ImmediateScheduler(),
            on_round_ready=recorder.rounds.append,
            on_feedback=recorder.feedback.append,
        )
        c.start()
        _answer(c, correct=False)
        assert recorder.feedback == [Feedback.ERROR, Feedback.NONE]
        assert c.pending_tasks == 0
        assert c.accepting_input

        _answer(c, correct=True)
        assert c.pending_tasks == 0
        assert len(recorder.rounds) == 2


# ---------------------------------------------------------------------------
# Feedback enum
# ---------------------------------------------------------------------------

class TestFeedback:
    def test_correct_flag(self):
        assert Feedback.SUCCESS.correct
        assert Feedback.LEVEL_UP.correct
        assert not Feedback.ERROR.correct
        assert not Feedback.NONE.correct
