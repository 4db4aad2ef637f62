"""Qt table models for the flights and aircraft tabs.

Both models are read-only and keep the record objects themselves, so the
window can map a selected row back to its flight id or registration.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt

from models.aircraft import Aircraft
from models.flight import Flight, format_date
from utils.timefmt import format_duration

Column = Tuple[str, Callable[[Any], str]]

FLIGHT_COLUMNS: Sequence[Column] = (
    ("Flight Number", lambda f: f.flight_number),
    ("Departure", lambda f: f.departure),
    ("Arrival", lambda f: f.arrival),
    ("Departure Time", lambda f: format_date(f.departure_date)),
    ("Arrival Time", lambda f: format_date(f.arrival_date)),
    ("Flight Time", lambda f: format_duration(f.flight_time)),
    ("Aircraft", lambda f: f.aircraft_label),
)

AIRCRAFT_COLUMNS: Sequence[Column] = (
    ("Registration", lambda a: a.registration),
    ("Airframe", lambda a: a.airframe.full_name),
    ("Engine", lambda a: a.engine),
    ("Weight Class", lambda a: a.airframe.weight_class.display_name),
)


class RecordTableModel(QAbstractTableModel):
    """Table of immutable records rendered through a fixed column list."""

    def __init__(self, columns: Sequence[Column], rows: Iterable[Any] | None = None, parent=None) -> None:
        super().__init__(parent)
        self._columns = list(columns)
        self._rows: List[Any] = list(rows or [])

    def refresh(self, rows: Iterable[Any]) -> None:
        self.beginResetModel()
        self._rows = list(rows)
        self.endResetModel()

    def record(self, row: int) -> Optional[Any]:
        if 0 <= row < len(self._rows):
            return self._rows[row]
        return None

    # Qt model API ------------------------------------------------------
    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:  # type: ignore[override]
        return 0 if parent.isValid() else len(self._rows)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:  # type: ignore[override]
        return 0 if parent.isValid() else len(self._columns)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole):  # type: ignore[override]
        if not index.isValid() or not (0 <= index.row() < len(self._rows)):
            return None
        if role == Qt.DisplayRole:
            _, render = self._columns[index.column()]
            return render(self._rows[index.row()])
        if role == Qt.TextAlignmentRole:
            return int(Qt.AlignCenter)
        return None

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.DisplayRole):  # type: ignore[override]
        if role != Qt.DisplayRole or orientation != Qt.Horizontal:
            return super().headerData(section, orientation, role)
        if 0 <= section < len(self._columns):
            return self._columns[section][0]
        return None


class FlightTableModel(RecordTableModel):
    def __init__(self, rows: Iterable[Flight] | None = None, parent=None) -> None:
        super().__init__(FLIGHT_COLUMNS, rows, parent)


class AircraftTableModel(RecordTableModel):
    def __init__(self, rows: Iterable[Aircraft] | None = None, parent=None) -> None:
        super().__init__(AIRCRAFT_COLUMNS, rows, parent)


__all__ = ["RecordTableModel", "FlightTableModel", "AircraftTableModel"]
