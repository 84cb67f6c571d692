"""Application entry point and setup for the Şifreci cipher game."""

import logging
import sys

from PySide6.QtGui import QFont, QGuiApplication
from PySide6.QtWidgets import QApplication

from sifreci.core.catalog import ContentCatalog
from sifreci.core.levels import LevelRepository
from sifreci.core.session import PlaySession
from sifreci.core.settings import GameSettings
from sifreci.ui.cipher_window import CipherWindow

EMOJI_FONTS = [
    "Noto Color Emoji",  # Linux (common)
    "Noto Emoji",
    "Segoe UI Emoji",  # Windows
    "Apple Color Emoji",  # macOS
]


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def configure_font(app: QApplication) -> None:
    """Prefer colour emoji fonts so the animal pictograms render on every platform."""
    app_font = QFont(app.font())
    app_font.setFamilies([app_font.family(), *EMOJI_FONTS])
    app_font.setPointSize(12)
    app.setFont(app_font)
    QGuiApplication.setFont(app_font)
    logging.info("Font fallbacks: %s", ", ".join(app_font.families()))


def run() -> None:
    """Load the game content, build the cipher window and start the event loop."""
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("Sifreci")
    app.setApplicationDisplayName("Şifreci")

    configure_font(app)

    levels = LevelRepository()
    catalog = ContentCatalog()
    settings = GameSettings.load()
    logging.info(
        "Loaded %d levels, %d pictograms, %d glyphs",
        len(levels.all()),
        len(catalog.pictograms),
        len(catalog.glyphs),
    )

    session = PlaySession(level=levels.first_level)
    window = CipherWindow(levels=levels, catalog=catalog, settings=settings, session=session)
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    run()
