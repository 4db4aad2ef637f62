from __future__ import annotations

from typing import Dict

from PySide6.QtCore import QObject, Slot
from PySide6.QtGui import QColor, QPalette
from PySide6.QtWidgets import QApplication

LIGHT: Dict[str, str] = {
    "bg_window": "#F5F6F8",
    "fg_primary": "#1B1F24",
    "ctrl_bg": "#FFFFFF",
    "alt_bg": "#EEF1F5",
    "accent": "#2F80ED",
    "highlighted_text": "#FFFFFF",
}

DARK: Dict[str, str] = {
    "bg_window": "#0F1115",
    "fg_primary": "#ECEFF4",
    "ctrl_bg": "#1B1F2A",
    "alt_bg": "#151821",
    "accent": "#58A6FF",
    "highlighted_text": "#0F1115",
}

THEMES = {"light": LIGHT, "dark": DARK}


class ThemeManager(QObject):
    """Applies the light or dark palette to the whole application."""

    def __init__(self, app: QApplication | None, dark_mode: bool = False):
        super().__init__()
        self._app = app
        self._dark = bool(dark_mode)
        self.apply_palette()

    @property
    def dark_mode(self) -> bool:
        return self._dark

    @Slot(bool)
    def set_dark_mode(self, enabled: bool) -> None:
        enabled = bool(enabled)
        if enabled == self._dark:
            return
        self._dark = enabled
        self.apply_palette()

    def tokens(self) -> Dict[str, str]:
        return THEMES["dark" if self._dark else "light"]

    def palette(self) -> QPalette:
        tokens = self.tokens()
        pal = QPalette()
        pal.setColor(QPalette.Window, QColor(tokens["bg_window"]))
        pal.setColor(QPalette.WindowText, QColor(tokens["fg_primary"]))
        pal.setColor(QPalette.Base, QColor(tokens["ctrl_bg"]))
        pal.setColor(QPalette.AlternateBase, QColor(tokens["alt_bg"]))
        pal.setColor(QPalette.Text, QColor(tokens["fg_primary"]))
        pal.setColor(QPalette.Button, QColor(tokens["ctrl_bg"]))
        pal.setColor(QPalette.ButtonText, QColor(tokens["fg_primary"]))
        pal.setColor(QPalette.Highlight, QColor(tokens["accent"]))
        pal.setColor(QPalette.HighlightedText, QColor(tokens["highlighted_text"]))
        return pal

    def apply_palette(self) -> None:
        if self._app is not None:
            self._app.setPalette(self.palette())


__all__ = ["ThemeManager", "THEMES"]
