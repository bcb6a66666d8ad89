"""Theme manager for loading and applying UI themes"""

from pathlib import Path
from PySide6.QtWidgets import QApplication
from PySide6.QtGui import QFont
from loguru import logger

from .colors import Palette


BASE_STYLESHEET = f"""
QWidget {{
    color: {Palette.TEXT};
}}
QMainWindow, QDialog {{
    background-color: {Palette.SURFACE};
}}
QLineEdit, QPlainTextEdit {{
    background-color: {Palette.SURFACE};
    border: 1px solid {Palette.OUTLINE};
    border-radius: 6px;
    padding: 6px 10px;
}}
QLineEdit:focus, QPlainTextEdit:focus {{
    border-color: {Palette.ACCENT};
}}
QPushButton {{
    background-color: {Palette.SURFACE_MUTED};
    border: 1px solid {Palette.OUTLINE};
    border-radius: 6px;
    padding: 6px 14px;
}}
QPushButton:hover {{
    background-color: {Palette.SURFACE_HOVER};
}}
QPushButton:disabled {{
    color: {Palette.TEXT_FAINT};
}}
QPushButton#primaryButton {{
    background-color: {Palette.ACCENT};
    border: none;
    color: {Palette.TEXT_ON_ACCENT};
    font-weight: 600;
}}
QPushButton#primaryButton:hover {{
    background-color: {Palette.ACCENT_PRESSED};
}}
QPushButton#primaryButton:disabled {{
    background-color: {Palette.ACCENT_DISABLED};
}}
QLabel#errorLabel {{
    background-color: {Palette.MESSAGE_ERROR_BG};
    color: {Palette.MESSAGE_ERROR};
    border-radius: 6px;
    padding: 8px 12px;
}}
QLabel#successLabel {{
    background-color: {Palette.MESSAGE_OK_BG};
    color: {Palette.MESSAGE_OK};
    border-radius: 6px;
    padding: 8px 12px;
}}
"""


class ThemeManager:
    """Manages loading and applying UI themes"""

    STYLES_DIR = Path(__file__).parent

    @classmethod
    def apply_light_theme(cls, app: QApplication) -> None:
        """Apply the Notion-style light theme to the application"""
        # Set default font
        font = QFont()
        font.setFamily("Segoe UI")
        font.setPointSize(10)
        font.setStyleStrategy(QFont.PreferAntialias)
        app.setFont(font)

        stylesheet = BASE_STYLESHEET

        # Optional user overrides next to the package
        qss_path = cls.STYLES_DIR / "notion_light.qss"
        if qss_path.exists():
            try:
                with open(qss_path, "r", encoding="utf-8") as f:
                    stylesheet += f.read()
                logger.info(f"Loaded theme overrides from {qss_path}")
            except Exception as e:
                logger.error(f"Failed to load theme: {e}")

        app.setStyleSheet(stylesheet)
