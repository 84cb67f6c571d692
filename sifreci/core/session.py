from __future__ import annotations

from dataclasses import dataclass

FIRST_LEVEL = 1


@dataclass
class PlaySession:
    """State of one cipher play session, shared by the controller and the UI.

    Nothing here is persisted; a fresh session starts at level 1 with no stars.
    """

    level: int = FIRST_LEVEL
    streak: int = 0
    stars: int = 0
    best_streak: int = 0
    rounds_won: int = 0
    rounds_lost: int = 0

    def record_correct(self) -> int:
        """Count a correct answer and return the new streak."""
        self.rounds_won += 1
        self.streak += 1
        self.best_streak = max(self.best_streak, self.streak)
        return self.streak

    def record_incorrect(self) -> None:
        self.rounds_lost += 1
        self.streak = 0

    def advance_level(self) -> int:
        """Move up one level and start the streak over."""
        self.level += 1
        self.streak = 0
        return self.level

    def award_stars(self, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Cannot award a negative number of stars: {amount}")
        self.stars += amount

    def reset(self, first_level: int = FIRST_LEVEL) -> None:
        """Back to a fresh session (player left the game)."""
        self.level = first_level
        self.streak = 0
        self.stars = 0
        self.best_streak = 0
        self.rounds_won = 0
        self.rounds_lost = 0
