from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from sifreci.core.errors import InvalidConfigurationError

# Pictogram/glyph pairs shown in each clue row.
ITEMS_PER_ROW = 2

DEFAULT_LEVELS_DIR = Path(__file__).resolve().parent.parent / "data" / "levels"


@dataclass(frozen=True)
class LevelConfig:
    number: int
    title: str
    pool_size: int
    clue_rows: int
    question_length: int
    icon_size: int = 48
    box_size: int = 80

    @property
    def reveal_slots(self) -> int:
        return self.clue_rows * ITEMS_PER_ROW

    def validate(self) -> None:
        """Raise InvalidConfigurationError unless this level can yield a solvable round."""
        if self.pool_size < 2:
            raise InvalidConfigurationError(
                f"level {self.number}: pool_size must be at least 2, got {self.pool_size}"
            )
        if self.clue_rows < 1 or self.question_length < 1:
            raise InvalidConfigurationError(
                f"level {self.number}: clue_rows and question_length must be positive"
            )
        if self.reveal_slots < self.pool_size:
            raise InvalidConfigurationError(
                f"level {self.number}: {self.clue_rows} clue rows x {ITEMS_PER_ROW} slots "
                f"cannot reveal a pool of {self.pool_size}"
            )


class LevelRepository:
    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base_dir = base_dir or DEFAULT_LEVELS_DIR
        self._levels = self._load_levels()

    def all(self) -> List[LevelConfig]:
        return list(self._levels.values())

    def get(self, number: int) -> LevelConfig:
        # bool is an int subclass; True must not silently mean level 1.
        if isinstance(number, bool) or number not in self._levels:
            raise InvalidConfigurationError(
                f"Unknown level {number!r}; expected one of {sorted(self._levels)}"
            )
        return self._levels[number]

    @property
    def first_level(self) -> int:
        return min(self._levels)

    @property
    def max_level(self) -> int:
        return max(self._levels)

    def _load_levels(self) -> Dict[int, LevelConfig]:
        base_dir = self._base_dir
        if not base_dir.exists():
            raise FileNotFoundError(f"Levels directory not found: {base_dir}")

        levels: Dict[int, LevelConfig] = {}
        for level_path in base_dir.glob("level*.yaml"):
            m = re.match(r"^level(\d+)$", level_path.stem)
            if not m:
                continue
            number = int(m.group(1))
            if number in levels:
                raise InvalidConfigurationError(f"{level_path.name}: level {number} is defined twice")
            raw = yaml.safe_load(level_path.read_text(encoding="utf-8"))
            if not raw or not isinstance(raw, dict):
                raise InvalidConfigurationError(f"{level_path.name}: expected a YAML mapping")
            title = raw.get("title")
            if not title or not isinstance(title, str):
                raise InvalidConfigurationError(f"{level_path.name}: missing or invalid 'title'")

            values: Dict[str, int] = {}
            for name in ("pool_size", "clue_rows", "question_length"):
                values[name] = _int_field(level_path, raw, name, required=True)
            for name in ("icon_size", "box_size"):
                if name in raw:
                    values[name] = _int_field(level_path, raw, name, required=False)

            level = LevelConfig(number=number, title=title.strip(), **values)
            level.validate()
            levels[number] = level

        if not levels:
            raise InvalidConfigurationError(f"No level files (level*.yaml) found in {base_dir}")
        # Play starts at level 1 and only ever moves up by one.
        expected = list(range(1, len(levels) + 1))
        if sorted(levels) != expected:
            raise InvalidConfigurationError(
                f"Levels in {base_dir} must be numbered {expected}, found {sorted(levels)}"
            )
        return dict(sorted(levels.items()))


def _int_field(path: Path, raw: dict, name: str, *, required: bool) -> int:
    value = raw.get(name)
    if value is None and required:
        raise InvalidConfigurationError(f"{path.name}: missing '{name}'")
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfigurationError(f"{path.name}: '{name}' must be an integer")
    return value
