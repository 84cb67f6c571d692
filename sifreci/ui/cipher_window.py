from __future__ import annotations

import logging
import random
from typing import List, Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QFrame,
    QHBoxLayout,
    QLabel,
    QLayout,
    QMainWindow,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from sifreci.core.catalog import ContentCatalog, Glyph
from sifreci.core.cipher import Round, RoundGenerator
from sifreci.core.levels import LevelRepository
from sifreci.core.progression import Feedback, ProgressionController
from sifreci.core.session import PlaySession
from sifreci.core.settings import GameSettings
from sifreci.ui.colors import CipherColors, faded
from sifreci.ui.models import OptionLook, OptionState, option_states
from sifreci.ui.scheduler import QtScheduler

logger = logging.getLogger(__name__)

FEEDBACK_TEXT = {
    Feedback.NONE: "",
    Feedback.SUCCESS: "Doğru bildin!",
    Feedback.LEVEL_UP: "Harika! Zorlaşıyor!",
    Feedback.ERROR: "Yanlış oldu. İpuçlarına dikkat et.",
}


def _clear_layout(layout: QLayout) -> None:
    while layout.count():
        item = layout.takeAt(0)
        w = item.widget()
        if w is not None:
            w.setParent(None)
            w.deleteLater()
        elif item.layout() is not None:
            _clear_layout(item.layout())
            item.layout().deleteLater()


def _glyph_label(glyph: Glyph, box: int) -> QLabel:
    label = QLabel(glyph.char)
    label.setAlignment(Qt.AlignCenter)
    label.setFixedSize(box, box)
    label.setStyleSheet(
        f"""
        QLabel {{
            background: {glyph.background};
            color: {glyph.color};
            border: 2px solid {glyph.border};
            border-bottom-width: 4px;
            border-radius: 10px;
            font-size: {max(18, box // 2)}px;
        }}
        """
    )
    return label


class CipherWindow(QMainWindow):
    """Cipher game screen: clue rows, the question, and the answer buttons."""

    def __init__(
        self,
        levels: LevelRepository,
        catalog: ContentCatalog,
        settings: GameSettings,
        session: Optional[PlaySession] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        super().__init__()
        self._levels = levels
        self._settings = settings
        self._session = session or PlaySession(level=levels.first_level)

        self._level_label: Optional[QLabel] = None
        self._difficulty_label: Optional[QLabel] = None
        self._stars_label: Optional[QLabel] = None
        self._clues_layout: Optional[QVBoxLayout] = None
        self._question_layout: Optional[QHBoxLayout] = None
        self._slots_layout: Optional[QHBoxLayout] = None
        self._options_layout: Optional[QVBoxLayout] = None
        self._feedback_label: Optional[QLabel] = None
        self._option_buttons: List[QPushButton] = []

        generator = RoundGenerator(
            levels,
            catalog,
            rng=rng,
            max_attempts=settings.max_distractor_attempts,
        )
        self._controller = ProgressionController(
            self._session,
            generator,
            QtScheduler(self),
            settings,
            on_round_ready=self._render_round,
            on_feedback=self._on_feedback,
            on_level_changed=self._on_level_changed,
            on_win=self._on_win,
        )

        self.setWindowTitle("Şifreci")
        self._build_ui()
        self._refresh_header()
        self._controller.start()

    @property
    def controller(self) -> ProgressionController:
        return self._controller

    def _build_ui(self) -> None:
        root = QWidget()
        root.setObjectName("cipherRoot")
        root.setStyleSheet(f"QWidget#cipherRoot {{ background: {CipherColors.BG}; }}")
        layout = QVBoxLayout(root)
        layout.setContentsMargins(24, 16, 24, 16)
        layout.setSpacing(12)

        header = QHBoxLayout()
        self._level_label = QLabel("")
        self._level_label.setStyleSheet(
            f"background: {CipherColors.PRIMARY_LIGHT}; color: {CipherColors.PRIMARY};"
            "border-radius: 12px; padding: 4px 12px; font-weight: bold;"
        )
        self._difficulty_label = QLabel("")
        self._difficulty_label.setStyleSheet(
            f"color: {CipherColors.TEXT_MUTED}; font-weight: bold; letter-spacing: 2px;"
        )
        self._stars_label = QLabel("")
        self._stars_label.setStyleSheet(
            f"background: white; color: {CipherColors.STAR}; border: 2px solid {CipherColors.STAR_BORDER};"
            "border-radius: 14px; padding: 4px 12px; font-size: 18px; font-weight: bold;"
        )
        header.addWidget(self._level_label)
        header.addStretch(1)
        header.addWidget(self._difficulty_label)
        header.addStretch(1)
        header.addWidget(self._stars_label)
        layout.addLayout(header)

        clues_card = self._card()
        clues_card_layout = QVBoxLayout(clues_card)
        clues_title = QLabel("İPUÇLARI (Sözlük)")
        clues_title.setAlignment(Qt.AlignCenter)
        clues_title.setStyleSheet(f"color: {CipherColors.PRIMARY_MUTED}; font-weight: bold;")
        clues_card_layout.addWidget(clues_title)
        self._clues_layout = QVBoxLayout()
        self._clues_layout.setSpacing(6)
        clues_card_layout.addLayout(self._clues_layout)
        layout.addWidget(clues_card)

        question_card = self._card()
        question_card_layout = QVBoxLayout(question_card)
        self._question_layout = QHBoxLayout()
        self._question_layout.setAlignment(Qt.AlignCenter)
        self._slots_layout = QHBoxLayout()
        self._slots_layout.setAlignment(Qt.AlignCenter)
        question_card_layout.addLayout(self._question_layout)
        arrow = QLabel("↓")
        arrow.setAlignment(Qt.AlignCenter)
        arrow.setStyleSheet(f"color: {CipherColors.SLOT_TEXT}; font-size: 20px;")
        question_card_layout.addWidget(arrow)
        question_card_layout.addLayout(self._slots_layout)
        layout.addWidget(question_card, 1)

        self._feedback_label = QLabel("")
        self._feedback_label.setAlignment(Qt.AlignCenter)
        self._feedback_label.setStyleSheet(f"color: {CipherColors.TEXT_PRIMARY}; font-size: 18px;")
        layout.addWidget(self._feedback_label)

        self._options_layout = QVBoxLayout()
        self._options_layout.setSpacing(8)
        layout.addLayout(self._options_layout)

        self.setCentralWidget(root)
        self.resize(640, 820)

    def _card(self) -> QFrame:
        card = QFrame()
        card.setObjectName("cipherCard")
        card.setStyleSheet(
            f"QFrame#cipherCard {{ background: {CipherColors.CARD_BG};"
            f" border: 2px solid {CipherColors.CARD_BORDER}; border-radius: 24px; }}"
        )
        return card

    def _refresh_header(self) -> None:
        level = self._levels.get(self._session.level)
        self._level_label.setText(f"🏆 Seviye {level.number}")
        self._difficulty_label.setText(level.title.upper())
        self._stars_label.setText(f"⭐ {self._session.stars}")

    def _render_round(self, cipher_round: Round) -> None:
        config = self._levels.get(cipher_round.level)
        icon_css = f"font-size: {config.icon_size}px;"

        _clear_layout(self._clues_layout)
        for row in cipher_round.clues:
            row_layout = QHBoxLayout()
            for pictogram in row.pictograms:
                animal = QLabel(pictogram.char)
                animal.setStyleSheet(icon_css)
                row_layout.addWidget(animal)
            row_layout.addStretch(1)
            arrow = QLabel("→")
            arrow.setStyleSheet(f"color: {CipherColors.PRIMARY_MUTED}; font-size: 22px;")
            row_layout.addWidget(arrow)
            row_layout.addStretch(1)
            for glyph in row.glyphs:
                row_layout.addWidget(_glyph_label(glyph, min(config.box_size, 56)))
            self._clues_layout.addLayout(row_layout)

        _clear_layout(self._question_layout)
        _clear_layout(self._slots_layout)
        for pictogram in cipher_round.question:
            cell = QLabel(pictogram.char)
            cell.setAlignment(Qt.AlignCenter)
            cell.setFixedSize(config.box_size, config.box_size)
            cell.setStyleSheet(
                f"background: {CipherColors.SLOT_BG}; border: 2px solid {CipherColors.SLOT_BORDER};"
                f"border-radius: 16px; {icon_css}"
            )
            self._question_layout.addWidget(cell)
            slot = QLabel("?")
            slot.setAlignment(Qt.AlignCenter)
            slot.setFixedSize(config.box_size, config.box_size)
            slot.setStyleSheet(
                f"background: {CipherColors.SLOT_BG}; color: {CipherColors.SLOT_TEXT};"
                f"border: 4px dashed {CipherColors.SLOT_BORDER}; border-radius: 12px;"
                "font-size: 24px; font-weight: bold;"
            )
            self._slots_layout.addWidget(slot)

        _clear_layout(self._options_layout)
        self._option_buttons = []
        states = option_states(cipher_round, Feedback.NONE)
        for state in states:
            button = QPushButton(" ".join(glyph.char for glyph in state.option))
            button.setMinimumHeight(64)
            button.setCursor(Qt.PointingHandCursor)
            button.clicked.connect(lambda _checked=False, i=state.index: self._controller.select(i))
            self._options_layout.addWidget(button)
            self._option_buttons.append(button)
        self._apply_option_states(states)
        self._refresh_header()

    def _apply_option_states(self, states: List[OptionState]) -> None:
        for button, state in zip(self._option_buttons, states):
            if state.look is OptionLook.HIGHLIGHTED:
                bg, border = CipherColors.SUCCESS_BG, CipherColors.SUCCESS_BORDER
            elif state.look is OptionLook.NEUTRAL:
                bg, border = CipherColors.ERROR_BG, CipherColors.ERROR_BORDER
            elif state.look is OptionLook.FADED:
                bg, border = CipherColors.OPTION_BG, faded(CipherColors.OPTION_BORDER)
            else:
                bg, border = CipherColors.OPTION_BG, CipherColors.OPTION_BORDER
            text_color = faded(CipherColors.TEXT_PRIMARY) if state.look is OptionLook.FADED else CipherColors.TEXT_PRIMARY
            button.setStyleSheet(
                f"""
                QPushButton {{
                    background: {bg};
                    color: {text_color};
                    border: 2px solid {border};
                    border-bottom-width: 8px;
                    border-radius: 16px;
                    font-size: 28px;
                }}
                """
            )
            button.setEnabled(state.enabled)

    def _on_feedback(self, feedback: Feedback) -> None:
        self._feedback_label.setText(FEEDBACK_TEXT[feedback])
        cipher_round = self._controller.round
        if cipher_round is not None:
            self._apply_option_states(option_states(cipher_round, feedback))

    def _on_level_changed(self, level: int) -> None:
        logger.info("Now playing level %d", level)
        self._refresh_header()

    def _on_win(self) -> None:
        self._session.award_stars(self._settings.stars_per_win)
        self._stars_label.setText(f"⭐ {self._session.stars}")

    def closeEvent(self, event) -> None:
        self._controller.close()
        self._session.reset(self._levels.first_level)
        super().closeEvent(event)
