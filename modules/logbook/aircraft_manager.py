"""Aircraft persistence and per-aircraft statistics."""

from __future__ import annotations

import logging
from concurrent.futures import Future
from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Callable, List, Optional, Union

from models.aircraft import Aircraft
from models.airframe import Airframe, UnknownAirframeError
from utils.db import ColumnTypeError, Row
from utils.timefmt import sum_durations

from .base import ManagerBase
from .exporters.csv_exporter import export_table

if TYPE_CHECKING:  # pragma: no cover
    from .flight_manager import FlightManager

logger = logging.getLogger(__name__)

AIRCRAFT_TABLE = "aircraft"
AIRCRAFT_TABLE_COLUMNS = ("registration", "airframe", "engine")
AIRCRAFT_TABLE_COLUMNTYPES = ("TEXT NOT NULL UNIQUE", "TEXT", "TEXT")
AIRCRAFT_TABLE_EXTRA = "PRIMARY KEY (registration)"

REGISTRATION, AIRFRAME, ENGINE = AIRCRAFT_TABLE_COLUMNS


def aircraft_from_row(row: Row) -> Aircraft:
    """Build an :class:`Aircraft` from a stored row.

    Raises :class:`UnknownAirframeError` or :class:`ColumnTypeError` for rows
    that cannot be mapped.
    """

    registration = row.text(REGISTRATION)
    if not registration:
        raise ColumnTypeError("aircraft row has no registration")
    stored_airframe = row.text(AIRFRAME)
    if stored_airframe is None:
        raise UnknownAirframeError([""])
    return Aircraft(
        registration=registration,
        airframe=Airframe.from_stored(stored_airframe),
        engine=row.text(ENGINE) or "",
    )


class AircraftManager(ManagerBase):
    """Reads and writes the ``aircraft`` table."""

    _flights: Optional["FlightManager"] = None

    def init(self) -> bool:
        """Create the aircraft table if needed."""
        return self.store.create_table(
            AIRCRAFT_TABLE,
            AIRCRAFT_TABLE_COLUMNS,
            AIRCRAFT_TABLE_COLUMNTYPES,
            AIRCRAFT_TABLE_EXTRA,
        )

    def bind_flights(self, flights: "FlightManager") -> None:
        self._flights = flights

    def verify_stored_airframes(self) -> None:
        """Fail fast when the table holds airframe values the catalog lacks."""

        unknown: List[str] = []
        for value in self.store.get_column(AIRCRAFT_TABLE, AIRFRAME, f"GROUP BY {AIRFRAME}"):
            if not isinstance(value, str):
                unknown.append(repr(value))
                continue
            try:
                Airframe.from_stored(value)
            except UnknownAirframeError:
                unknown.append(value)
        if unknown:
            raise UnknownAirframeError(unknown)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_all_aircraft_blocking(self) -> List[Aircraft]:
        """Return every stored aircraft; blocks until the query completes."""

        aircraft: List[Aircraft] = []
        for row in self.store.get_all_rows(AIRCRAFT_TABLE, AIRCRAFT_TABLE_COLUMNS):
            try:
                aircraft.append(aircraft_from_row(row))
            except (UnknownAirframeError, ColumnTypeError) as exc:
                logger.warning("Skipping aircraft row %r: %s", dict(row), exc)
        return aircraft

    def get_all_aircraft(self, callback: Optional[Callable[[List[Aircraft]], None]] = None) -> Future:
        return self._run_async(self.get_all_aircraft_blocking, callback)

    def get_aircraft_blocking(self, registration: Optional[str]) -> Optional[Aircraft]:
        """Look up one aircraft by registration; ``None`` if absent."""

        if registration is None:
            return None
        rows = self.store.get_rows(AIRCRAFT_TABLE, REGISTRATION, registration, AIRCRAFT_TABLE_COLUMNS)
        if not rows:
            return None
        try:
            return aircraft_from_row(rows[0])
        except (UnknownAirframeError, ColumnTypeError) as exc:
            logger.warning("Aircraft %s cannot be read: %s", registration, exc)
            return None

    def get_aircraft(
        self,
        registration: Optional[str],
        callback: Optional[Callable[[Optional[Aircraft]], None]] = None,
    ) -> Future:
        return self._run_async(lambda: self.get_aircraft_blocking(registration), callback)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def add_aircraft_blocking(self, aircraft: Aircraft) -> bool:
        """Insert the aircraft, or overwrite the stored one with the same registration."""

        values = {
            AIRFRAME: aircraft.airframe.stored_value,
            ENGINE: aircraft.engine,
        }
        return self.store.upsert_row(AIRCRAFT_TABLE, REGISTRATION, aircraft.registration, values)

    def add_aircraft(self, aircraft: Aircraft, callback: Optional[Callable[[bool], None]] = None) -> Future:
        return self._run_async(lambda: self.add_aircraft_blocking(aircraft), callback)

    def remove_aircraft_blocking(self, registration: str) -> bool:
        """Delete by registration.  ``True`` even when nothing matched."""
        return self.store.delete_row(AIRCRAFT_TABLE, REGISTRATION, registration)

    def remove_aircraft(self, registration: str, callback: Optional[Callable[[bool], None]] = None) -> Future:
        return self._run_async(lambda: self.remove_aircraft_blocking(registration), callback)

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------
    def _flight_manager(self) -> "FlightManager":
        if self._flights is None:
            raise RuntimeError("AircraftManager has no FlightManager bound; call bind_flights() first")
        return self._flights

    def get_flight_time_blocking(self, registration: str) -> timedelta:
        """Total logged flight time of one aircraft; zero if it has no flights."""

        flights = self._flight_manager().get_flights_blocking()
        return self._flight_time(registration, flights)

    def get_flight_time(self, registration: str, callback: Optional[Callable[[timedelta], None]] = None) -> Future:
        return self._run_async(lambda: self.get_flight_time_blocking(registration), callback)

    def get_most_used_aircraft_blocking(self) -> Optional[Aircraft]:
        """Aircraft with the most logged flight time.

        On a tie the aircraft read last wins.  ``None`` when no aircraft exist.
        """

        flights = self._flight_manager().get_flights_blocking()
        best: Optional[Aircraft] = None
        best_time: Optional[timedelta] = None
        for aircraft in self.get_all_aircraft_blocking():
            total = self._flight_time(aircraft.registration, flights)
            if best_time is None or total >= best_time:
                best, best_time = aircraft, total
        return best

    def get_most_used_aircraft(self, callback: Optional[Callable[[Optional[Aircraft]], None]] = None) -> Future:
        return self._run_async(self.get_most_used_aircraft_blocking, callback)

    @staticmethod
    def _flight_time(registration: str, flights) -> timedelta:
        return sum_durations(
            f.flight_time
            for f in flights
            if f.aircraft is not None and f.aircraft.registration == registration
        )

    # ------------------------------------------------------------------
    def export(self, directory: Union[str, Path]) -> Optional[Path]:
        """Dump the aircraft table to a timestamped CSV file in ``directory``."""
        return export_table(self.store, AIRCRAFT_TABLE, directory)


__all__ = [
    "AircraftManager",
    "aircraft_from_row",
    "AIRCRAFT_TABLE",
    "AIRCRAFT_TABLE_COLUMNS",
]
