"""Application configuration and setup"""

import sys
from PySide6.QtWidgets import QApplication
from loguru import logger

from . import __version__
from .core.config import get_config_manager
from .styles.theme import ThemeManager


class MinuteScribeApp(QApplication):
    """
    Main application class with custom configuration.
    """

    def __init__(self, argv: list[str] | None = None):
        if argv is None:
            argv = sys.argv
        super().__init__(argv)

        self._setup_application()
        self._setup_logging()
        self._apply_theme()

    def _setup_application(self) -> None:
        """Configure application metadata and settings"""
        self.setApplicationName("MinuteScribe")
        self.setApplicationVersion(__version__)
        self.setOrganizationName("MinuteScribe")

    def _setup_logging(self) -> None:
        """Configure loguru logging"""
        level = get_config_manager().config.log_level
        logger.remove()  # Remove default handler
        logger.add(
            sys.stderr,
            format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
            level=level,
        )
        logger.info("MinuteScribe starting...")

    def _apply_theme(self) -> None:
        """Apply the UI theme"""
        ThemeManager.apply_light_theme(self)
