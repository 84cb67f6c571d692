"""Symbol-cipher round generation.

A round teaches a fresh animal → shape mapping through clue rows and then asks
the child to encode a short animal sequence. ``RoundGenerator`` builds rounds
in five steps:

1. pick ``pool_size`` animals and shapes and zip them into a mapping,
2. fill the clue rows so every pooled animal is revealed at least once,
3. draw the question from the pool and encode it into the correct answer,
4. add up to two wrong answers with distinct signatures (the first one tries
   the correct shapes in a different order),
5. shuffle the answers and locate the correct one again by signature.

All shuffles go through ``random.Random.shuffle`` (Fisher–Yates), so every
ordering is equally likely.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, TypeVar

from sifreci.core.catalog import ContentCatalog, Glyph, Pictogram
from sifreci.core.errors import InvalidConfigurationError, SelectionOutOfRangeError
from sifreci.core.levels import ITEMS_PER_ROW, LevelConfig, LevelRepository

logger = logging.getLogger(__name__)

MAX_OPTIONS = 3
DEFAULT_MAX_ATTEMPTS = 100

Option = Tuple[Glyph, ...]
Signature = Tuple[str, ...]

T = TypeVar("T")


def signature(option: Sequence[Glyph]) -> Signature:
    """Ordered glyph keys of an option; two options are the same answer iff signatures match."""
    return tuple(glyph.key for glyph in option)


@dataclass(frozen=True)
class ClueRow:
    pictograms: Tuple[Pictogram, ...]
    glyphs: Tuple[Glyph, ...]

    def pairs(self) -> List[Tuple[Pictogram, Glyph]]:
        return list(zip(self.pictograms, self.glyphs))


@dataclass(frozen=True)
class Round:
    """One playable cipher round. Read-only once generated."""

    level: int
    pairs: Tuple[Tuple[Pictogram, Glyph], ...]
    clues: Tuple[ClueRow, ...]
    question: Tuple[Pictogram, ...]
    options: Tuple[Option, ...]
    correct_index: int

    @property
    def mapping(self) -> Mapping[Pictogram, Glyph]:
        return MappingProxyType(dict(self.pairs))

    @property
    def pool(self) -> Tuple[Pictogram, ...]:
        return tuple(p for p, _ in self.pairs)

    @property
    def glyph_pool(self) -> Tuple[Glyph, ...]:
        return tuple(g for _, g in self.pairs)

    @property
    def correct_option(self) -> Option:
        return self.options[self.correct_index]

    def encode(self, pictograms: Sequence[Pictogram]) -> Option:
        """Apply the mapping element-wise."""
        return tuple(self.mapping[p] for p in pictograms)

    def signatures(self) -> List[Signature]:
        return [signature(option) for option in self.options]

    def revealed(self) -> set[Pictogram]:
        """Every pictogram shown in at least one clue row."""
        return {p for row in self.clues for p in row.pictograms}


@dataclass(frozen=True)
class SelectionResult:
    correct: bool
    selected_index: int
    correct_index: int


def resolve_selection(cipher_round: Round, selected_index: int) -> SelectionResult:
    """Compare a chosen option index against the round's correct index."""
    valid_type = isinstance(selected_index, int) and not isinstance(selected_index, bool)
    if not valid_type or not 0 <= selected_index < len(cipher_round.options):
        raise SelectionOutOfRangeError(
            f"Option {selected_index!r} is out of range for a round with "
            f"{len(cipher_round.options)} options"
        )
    return SelectionResult(
        correct=selected_index == cipher_round.correct_index,
        selected_index=selected_index,
        correct_index=cipher_round.correct_index,
    )


class RoundGenerator:
    """Builds rounds for a level from the level table and content catalog."""

    def __init__(
        self,
        levels: LevelRepository,
        catalog: ContentCatalog,
        rng: Optional[random.Random] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        if max_attempts < 1:
            raise InvalidConfigurationError(f"max_attempts must be at least 1, got {max_attempts}")
        self._levels = levels
        self._catalog = catalog
        self._rng = rng or random.Random()
        self._max_attempts = max_attempts

    @property
    def max_level(self) -> int:
        return self._levels.max_level

    def generate(self, level: int) -> Round:
        config = self._levels.get(level)
        config.validate()

        mapping = self._select_pool(config)
        clues = self._build_clues(config, mapping)
        question = self._build_question(config, mapping)
        correct = tuple(mapping[p] for p in question)
        options = self._build_options(list(mapping.values()), correct)
        options, correct_index = self._shuffle_options(options, correct)

        logger.debug(
            "Generated level %d round: question=%s options=%d correct=%d",
            config.number,
            [p.key for p in question],
            len(options),
            correct_index,
        )
        return Round(
            level=config.number,
            pairs=tuple(mapping.items()),
            clues=clues,
            question=question,
            options=options,
            correct_index=correct_index,
        )

    def _shuffled(self, items: Sequence[T]) -> List[T]:
        result = list(items)
        self._rng.shuffle(result)
        return result

    def _select_pool(self, config: LevelConfig) -> Dict[Pictogram, Glyph]:
        pictograms = self._catalog.pictograms
        glyphs = self._catalog.glyphs
        if config.pool_size > min(len(pictograms), len(glyphs)):
            raise InvalidConfigurationError(
                f"level {config.number}: pool of {config.pool_size} needs more than the "
                f"{len(pictograms)} pictograms / {len(glyphs)} glyphs in the catalog"
            )
        chosen_pictograms = self._shuffled(pictograms)[: config.pool_size]
        chosen_glyphs = self._shuffled(glyphs)[: config.pool_size]
        return dict(zip(chosen_pictograms, chosen_glyphs))

    def _build_clues(self, config: LevelConfig, mapping: Dict[Pictogram, Glyph]) -> Tuple[ClueRow, ...]:
        pool = list(mapping)
        to_reveal = self._shuffled(pool)
        rows: List[ClueRow] = []
        for _ in range(config.clue_rows):
            row: List[Pictogram] = []
            for _ in range(ITEMS_PER_ROW):
                if to_reveal:
                    row.append(to_reveal.pop())
                else:
                    row.append(self._rng.choice(pool))
            rows.append(ClueRow(pictograms=tuple(row), glyphs=tuple(mapping[p] for p in row)))
        return tuple(rows)

    def _build_question(self, config: LevelConfig, mapping: Dict[Pictogram, Glyph]) -> Tuple[Pictogram, ...]:
        pool = list(mapping)
        return tuple(self._rng.choice(pool) for _ in range(config.question_length))

    def _build_options(self, glyph_pool: Sequence[Glyph], correct: Option) -> List[Option]:
        seen = {signature(correct)}
        options: List[Option] = [correct]

        # Only the first wrong answer tries a reordering of the correct shapes.
        # An answer like (star, star) has no other ordering to try.
        if len(set(signature(correct))) > 1:
            permutation_tries = max(1, self._max_attempts // 10)
        else:
            permutation_tries = 0

        attempts = 0
        while len(options) < MAX_OPTIONS and attempts < self._max_attempts:
            attempts += 1
            if len(options) == 1 and permutation_tries > 0:
                permutation_tries -= 1
                candidate = tuple(self._shuffled(correct))
            else:
                candidate = tuple(self._rng.choice(glyph_pool) for _ in correct)
            key = signature(candidate)
            if key in seen:
                continue
            seen.add(key)
            options.append(candidate)

        if len(options) < MAX_OPTIONS:
            logger.warning(
                "Only %d unique options after %d attempts (pool of %d, length %d)",
                len(options),
                attempts,
                len(glyph_pool),
                len(correct),
            )
        return options

    def _shuffle_options(self, options: Sequence[Option], correct: Option) -> Tuple[Tuple[Option, ...], int]:
        shuffled = self._shuffled(options)
        correct_signature = signature(correct)
        correct_index = next(i for i, option in enumerate(shuffled) if signature(option) == correct_signature)
        return tuple(shuffled), correct_index


@lru_cache(maxsize=1)
def _packaged_content() -> Tuple[LevelRepository, ContentCatalog]:
    return LevelRepository(), ContentCatalog()


def generate_round(level: int, rng: Optional[random.Random] = None) -> Round:
    """Generate a round from the packaged level table and catalog."""
    levels, catalog = _packaged_content()
    return RoundGenerator(levels, catalog, rng=rng).generate(level)
