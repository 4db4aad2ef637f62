"""Flight persistence and logbook-wide statistics."""

from __future__ import annotations

import logging
import uuid
from concurrent.futures import Future
from datetime import timedelta
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from models.aircraft import Aircraft
from models.flight import Flight
from utils.app_signals import Dispatcher
from utils.db import ColumnTypeError, RecordStore, Row
from utils.scheduler import Scheduler
from utils.timefmt import sum_durations

from .aircraft_manager import AircraftManager
from .base import ManagerBase
from .exporters.csv_exporter import export_table

logger = logging.getLogger(__name__)

FLIGHTS_TABLE = "flights"
FLIGHTS_TABLE_COLUMNS = (
    "uuid",
    "flightnumber",
    "dep",
    "arr",
    "departuretime",
    "arrivaltime",
    "aircraft",
)
FLIGHTS_TABLE_COLUMNTYPES = (
    "TEXT UNIQUE NOT NULL",
    "TEXT",
    "TEXT",
    "TEXT",
    "INTEGER",
    "INTEGER",
    "TEXT",
)
FLIGHTS_TABLE_EXTRA = "PRIMARY KEY (uuid)"

UUID, FLIGHT_NUMBER, DEPARTURE, ARRIVAL, DEPARTURE_TIME, ARRIVAL_TIME, AIRCRAFT = FLIGHTS_TABLE_COLUMNS


class FlightManager(ManagerBase):
    """Reads and writes the ``flights`` table."""

    def __init__(
        self,
        store: RecordStore,
        scheduler: Scheduler,
        aircraft: AircraftManager,
        dispatcher: Optional[Dispatcher] = None,
    ) -> None:
        super().__init__(store, scheduler, dispatcher)
        self.aircraft = aircraft
        aircraft.bind_flights(self)

    def init(self) -> bool:
        return self.store.create_table(
            FLIGHTS_TABLE,
            FLIGHTS_TABLE_COLUMNS,
            FLIGHTS_TABLE_COLUMNTYPES,
            FLIGHTS_TABLE_EXTRA,
        )

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------
    def _flight_from_row(self, row: Row, fleet: Dict[str, Aircraft]) -> Optional[Flight]:
        key = row.get(UUID)
        try:
            flight_id = uuid.UUID(str(key))
        except ValueError:
            logger.warning("Skipping flight row with invalid key %r", key)
            return None
        if str(flight_id) != key:
            # lookups and deletes match the canonical text only
            logger.warning("Skipping flight row with non-canonical key %r", key)
            return None
        try:
            registration = row.text(AIRCRAFT)
            return Flight(
                id=flight_id,
                flight_number=row.text(FLIGHT_NUMBER) or "",
                departure=row.text(DEPARTURE) or "",
                arrival=row.text(ARRIVAL) or "",
                departure_time_millis=row.integer(DEPARTURE_TIME) or 0,
                arrival_time_millis=row.integer(ARRIVAL_TIME) or 0,
                aircraft=fleet.get(registration) if registration else None,
            )
        except ColumnTypeError as exc:
            logger.warning("Skipping flight %s: %s", flight_id, exc)
            return None

    def _fleet(self) -> Dict[str, Aircraft]:
        return {a.registration: a for a in self.aircraft.get_all_aircraft_blocking()}

    def _map_rows(self, rows: List[Row]) -> List[Flight]:
        if not rows:
            return []
        fleet = self._fleet()
        flights = []
        for row in rows:
            flight = self._flight_from_row(row, fleet)
            if flight is not None:
                flights.append(flight)
        return flights

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_flights_blocking(self) -> List[Flight]:
        """Every logged flight, in table order."""
        return self._map_rows(self.store.get_all_rows(FLIGHTS_TABLE, FLIGHTS_TABLE_COLUMNS))

    def get_flights(self, callback: Optional[Callable[[List[Flight]], None]] = None) -> Future:
        return self._run_async(self.get_flights_blocking, callback)

    def get_flights_by_number_blocking(self, flight_number: str) -> List[Flight]:
        rows = self.store.get_rows(FLIGHTS_TABLE, FLIGHT_NUMBER, flight_number, FLIGHTS_TABLE_COLUMNS)
        return self._map_rows(rows)

    def get_flights_by_number(
        self,
        flight_number: str,
        callback: Optional[Callable[[List[Flight]], None]] = None,
    ) -> Future:
        return self._run_async(lambda: self.get_flights_by_number_blocking(flight_number), callback)

    def get_flight_blocking(self, flight_id: Optional[uuid.UUID]) -> Optional[Flight]:
        if flight_id is None:
            return None
        rows = self.store.get_rows(FLIGHTS_TABLE, UUID, str(flight_id), FLIGHTS_TABLE_COLUMNS)
        flights = self._map_rows(rows[:1])
        return flights[0] if flights else None

    def get_flight(
        self,
        flight_id: Optional[uuid.UUID],
        callback: Optional[Callable[[Optional[Flight]], None]] = None,
    ) -> Future:
        return self._run_async(lambda: self.get_flight_blocking(flight_id), callback)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def add_flight_blocking(self, flight: Flight) -> bool:
        """Insert or overwrite the flight with the same id."""

        values = {
            FLIGHT_NUMBER: flight.flight_number,
            DEPARTURE: flight.departure,
            ARRIVAL: flight.arrival,
            DEPARTURE_TIME: flight.departure_time_millis,
            ARRIVAL_TIME: flight.arrival_time_millis,
            AIRCRAFT: flight.aircraft.registration if flight.aircraft is not None else None,
        }
        return self.store.upsert_row(FLIGHTS_TABLE, UUID, str(flight.id), values)

    def add_flight(self, flight: Flight, callback: Optional[Callable[[bool], None]] = None) -> Future:
        return self._run_async(lambda: self.add_flight_blocking(flight), callback)

    def remove_flight_blocking(self, flight_id: uuid.UUID) -> bool:
        return self.store.delete_row(FLIGHTS_TABLE, UUID, str(flight_id))

    def remove_flight(self, flight_id: uuid.UUID, callback: Optional[Callable[[bool], None]] = None) -> Future:
        return self._run_async(lambda: self.remove_flight_blocking(flight_id), callback)

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------
    def get_total_flight_time_blocking(self) -> timedelta:
        return sum_durations(f.flight_time for f in self.get_flights_blocking())

    def get_total_flight_time(self, callback: Optional[Callable[[timedelta], None]] = None) -> Future:
        return self._run_async(self.get_total_flight_time_blocking, callback)

    def get_longest_flight_blocking(self) -> Optional[Flight]:
        """Flight with the greatest flight time; the first one wins a tie."""

        longest: Optional[Flight] = None
        for flight in self.get_flights_blocking():
            if longest is None or flight.flight_time > longest.flight_time:
                longest = flight
        return longest

    def get_longest_flight(self, callback: Optional[Callable[[Optional[Flight]], None]] = None) -> Future:
        return self._run_async(self.get_longest_flight_blocking, callback)

    def get_flight_count_blocking(self) -> int:
        return self.store.get_row_count(FLIGHTS_TABLE)

    def get_flight_count(self, callback: Optional[Callable[[int], None]] = None) -> Future:
        return self._run_async(self.get_flight_count_blocking, callback)

    def _most_frequent(self, column: str) -> Optional[str]:
        values = self.store.get_column(
            FLIGHTS_TABLE, column, f"GROUP BY {column} ORDER BY COUNT({column}) DESC"
        )
        if not values or values[0] is None:
            return None
        return str(values[0])

    def get_most_frequent_departure_blocking(self) -> Optional[str]:
        return self._most_frequent(DEPARTURE)

    def get_most_frequent_departure(self, callback: Optional[Callable[[Optional[str]], None]] = None) -> Future:
        return self._run_async(self.get_most_frequent_departure_blocking, callback)

    def get_most_frequent_arrival_blocking(self) -> Optional[str]:
        return self._most_frequent(ARRIVAL)

    def get_most_frequent_arrival(self, callback: Optional[Callable[[Optional[str]], None]] = None) -> Future:
        return self._run_async(self.get_most_frequent_arrival_blocking, callback)

    # ------------------------------------------------------------------
    def export(self, directory: Union[str, Path]) -> Optional[Path]:
        return export_table(self.store, FLIGHTS_TABLE, directory)


__all__ = ["FlightManager", "FLIGHTS_TABLE", "FLIGHTS_TABLE_COLUMNS"]
