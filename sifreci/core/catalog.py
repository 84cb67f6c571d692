from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from sifreci.core.errors import InvalidConfigurationError

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "catalog.yaml"


@dataclass(frozen=True)
class Pictogram:
    key: str
    name: str
    char: str


@dataclass(frozen=True)
class Glyph:
    key: str
    char: str
    color: str
    background: str
    border: str


class ContentCatalog:
    """Static animal pictograms and shape glyphs, read once from ``catalog.yaml``."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path or DEFAULT_CATALOG_PATH
        self._pictograms, self._glyphs = self._load()

    @property
    def pictograms(self) -> List[Pictogram]:
        return list(self._pictograms)

    @property
    def glyphs(self) -> List[Glyph]:
        return list(self._glyphs)

    def pictogram(self, key: str) -> Pictogram:
        for item in self._pictograms:
            if item.key == key:
                return item
        raise KeyError(key)

    def glyph(self, key: str) -> Glyph:
        for item in self._glyphs:
            if item.key == key:
                return item
        raise KeyError(key)

    def _load(self) -> tuple[List[Pictogram], List[Glyph]]:
        if not self._path.exists():
            raise FileNotFoundError(f"Catalog file not found: {self._path}")
        raw = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        if not raw or not isinstance(raw, dict):
            raise InvalidConfigurationError(
                f"{self._path.name}: expected YAML with 'pictograms' and 'glyphs'"
            )

        pictograms = [
            Pictogram(key=entry["id"], name=entry["name"], char=entry["char"])
            for entry in self._entries(raw, "pictograms", ("id", "name", "char"))
        ]
        glyphs = [
            Glyph(
                key=entry["id"],
                char=entry["char"],
                color=entry["color"],
                background=entry["background"],
                border=entry["border"],
            )
            for entry in self._entries(raw, "glyphs", ("id", "char", "color", "background", "border"))
        ]
        return pictograms, glyphs

    def _entries(self, raw: dict, section: str, fields: tuple[str, ...]) -> List[Dict[str, str]]:
        items = raw.get(section)
        if not items or not isinstance(items, list):
            raise InvalidConfigurationError(f"{self._path.name}: missing or empty '{section}'")

        entries: List[Dict[str, str]] = []
        seen: set[str] = set()
        for index, item in enumerate(items):
            if not isinstance(item, dict):
                raise InvalidConfigurationError(f"{self._path.name}: {section}[{index}] is not a mapping")
            missing = [name for name in fields if not str(item.get(name, "")).strip()]
            if missing:
                raise InvalidConfigurationError(
                    f"{self._path.name}: {section}[{index}] missing {', '.join(missing)}"
                )
            entry = {name: str(item[name]).strip() for name in fields}
            if entry["id"] in seen:
                raise InvalidConfigurationError(
                    f"{self._path.name}: duplicate id '{entry['id']}' in '{section}'"
                )
            seen.add(entry["id"])
            entries.append(entry)
        return entries
