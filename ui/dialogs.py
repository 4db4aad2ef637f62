from __future__ import annotations

"""Modal message helpers used by the logbook window."""

from PySide6.QtWidgets import QMessageBox, QWidget


def show_error(parent: QWidget | None, message: str) -> None:
    QMessageBox.critical(parent, "Error", message)


def show_success(parent: QWidget | None, message: str) -> None:
    QMessageBox.information(parent, "Success", message)


def confirm(parent: QWidget | None, message: str) -> bool:
    """Ask a yes/no question; ``True`` only on an explicit yes."""
    answer = QMessageBox.question(
        parent,
        "Please confirm",
        message,
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No,
    )
    return answer == QMessageBox.Yes


__all__ = ["show_error", "show_success", "confirm"]
