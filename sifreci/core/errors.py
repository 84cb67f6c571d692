"""Exceptions raised by the cipher core."""

from __future__ import annotations


class SifreciError(Exception):
    """Base class for every error raised by the game core."""


class InvalidConfigurationError(SifreciError, ValueError):
    """Unknown difficulty level or a level/catalog setup that cannot yield a solvable round."""


class SelectionOutOfRangeError(SifreciError, IndexError):
    """A selection referenced an option index the round does not have."""
