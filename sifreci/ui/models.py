"""Data models used by the UI."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List

from sifreci.core.cipher import Option, Round
from sifreci.core.progression import Feedback


class OptionLook(Enum):
    NORMAL = "normal"
    HIGHLIGHTED = "highlighted"
    NEUTRAL = "neutral"
    FADED = "faded"


@dataclass
class OptionState:
    """UI state for one answer button."""

    index: int
    option: Option
    look: OptionLook
    enabled: bool


def option_states(cipher_round: Round, feedback: Feedback) -> List[OptionState]:
    """Styling for each option under the current feedback.

    After a correct answer the right option is highlighted. After a wrong one
    the other options fade and the right option turns neutral without being
    revealed.
    """
    states: List[OptionState] = []
    for index, option in enumerate(cipher_round.options):
        is_correct = index == cipher_round.correct_index
        if feedback.correct and is_correct:
            look = OptionLook.HIGHLIGHTED
        elif feedback is Feedback.ERROR:
            look = OptionLook.NEUTRAL if is_correct else OptionLook.FADED
        else:
            look = OptionLook.NORMAL
        states.append(OptionState(index=index, option=option, look=look, enabled=feedback is Feedback.NONE))
    return states
