from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

from sifreci.core.errors import InvalidConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path(__file__).resolve().parent.parent / "data" / "settings.yaml"


@dataclass(frozen=True)
class GameSettings:
    """Pacing and reward knobs for the cipher game.

    Delays are in milliseconds. ``max_distractor_attempts`` bounds the
    rejection-sampling loop that hunts for unique wrong answers.
    """

    advance_threshold: int = 2
    stars_per_win: int = 2
    success_delay_ms: int = 2500
    level_up_delay_ms: int = 1500
    error_delay_ms: int = 1500
    max_distractor_attempts: int = 100

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "GameSettings":
        """Read settings from YAML; keys that are absent keep their defaults."""
        path = path or DEFAULT_SETTINGS_PATH
        if not path.exists():
            logger.info("No settings file at %s, using defaults", path)
            return cls()

        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        if raw is None:
            return cls()
        if not isinstance(raw, dict):
            raise InvalidConfigurationError(f"{path.name}: expected a YAML mapping")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            logger.warning("%s: ignoring unknown settings %s", path.name, ", ".join(unknown))

        values = {}
        for name in known & set(raw):
            value = raw[name]
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise InvalidConfigurationError(f"{path.name}: '{name}' must be a non-negative integer")
            values[name] = value

        settings = cls(**values)
        if settings.advance_threshold < 1:
            raise InvalidConfigurationError(f"{path.name}: 'advance_threshold' must be at least 1")
        if settings.max_distractor_attempts < 1:
            raise InvalidConfigurationError(f"{path.name}: 'max_distractor_attempts' must be at least 1")
        return settings
