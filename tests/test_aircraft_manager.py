from __future__ import annotations

import uuid
from datetime import timedelta

import pytest

from models.aircraft import Aircraft
from models.airframe import Airframe, UnknownAirframeError
from models.flight import Flight
from modules.logbook.aircraft_manager import AIRCRAFT_TABLE, AircraftManager
from modules.logbook.flight_manager import FlightManager
from utils.db import RecordStore

HOUR = 3_600_000


def _flight(aircraft, hours: float, number: str = "AC1") -> Flight:
    return Flight(uuid.uuid4(), number, "CYYZ", "KJFK", 0, int(hours * HOUR), aircraft)


def test_aircraft_scenario(aircraft_manager: AircraftManager) -> None:
    aircraft = Aircraft("C-FXCD", Airframe.A320, "CFM56")
    assert aircraft_manager.add_aircraft_blocking(aircraft)
    assert aircraft_manager.get_aircraft_blocking("C-FXCD") == aircraft
    assert aircraft_manager.remove_aircraft_blocking("C-FXCD")
    assert aircraft_manager.get_aircraft_blocking("C-FXCD") is None


def test_get_aircraft_with_none_key(aircraft_manager: AircraftManager) -> None:
    assert aircraft_manager.get_aircraft_blocking(None) is None


def test_re_adding_overwrites(aircraft_manager: AircraftManager, store: RecordStore) -> None:
    aircraft_manager.add_aircraft_blocking(Aircraft("C-FXCD", Airframe.A320, "CFM56"))
    aircraft_manager.add_aircraft_blocking(Aircraft("C-FXCD", Airframe.A320_NEO, "LEAP-1A"))
    assert store.get_row_count(AIRCRAFT_TABLE) == 1
    assert aircraft_manager.get_aircraft_blocking("C-FXCD") == Aircraft("C-FXCD", Airframe.A320_NEO, "LEAP-1A")


def test_airframe_stored_by_member_name(aircraft_manager: AircraftManager, store: RecordStore) -> None:
    aircraft_manager.add_aircraft_blocking(Aircraft("N787BA", Airframe.B787_9, "GEnx"))
    assert store.get_value(AIRCRAFT_TABLE, "registration", "N787BA", "airframe") == "B787_9"


def test_unknown_airframe_rows_are_skipped(aircraft_manager: AircraftManager, store: RecordStore) -> None:
    aircraft_manager.add_aircraft_blocking(Aircraft("C-GOOD", Airframe.A321, "V2500"))
    store.upsert_row(AIRCRAFT_TABLE, "registration", "C-BAD1", {"airframe": "CONCORDE", "engine": "Olympus"})
    all_aircraft = aircraft_manager.get_all_aircraft_blocking()
    assert [a.registration for a in all_aircraft] == ["C-GOOD"]
    assert aircraft_manager.get_aircraft_blocking("C-BAD1") is None


def test_verify_stored_airframes(aircraft_manager: AircraftManager, store: RecordStore) -> None:
    aircraft_manager.add_aircraft_blocking(Aircraft("C-GOOD", Airframe.A321, "V2500"))
    aircraft_manager.verify_stored_airframes()
    store.upsert_row(AIRCRAFT_TABLE, "registration", "C-BAD1", {"airframe": "CONCORDE", "engine": "Olympus"})
    with pytest.raises(UnknownAirframeError) as info:
        aircraft_manager.verify_stored_airframes()
    assert info.value.values == ["CONCORDE"]


def test_async_variants_deliver_through_callback(aircraft_manager: AircraftManager) -> None:
    aircraft = Aircraft("C-FXCD", Airframe.A320, "CFM56")
    results = []
    future = aircraft_manager.add_aircraft(aircraft, results.append)
    assert future.result() is True
    aircraft_manager.get_all_aircraft(results.append)
    aircraft_manager.get_aircraft("C-FXCD", results.append)
    assert results == [True, [aircraft], aircraft]


def test_aggregates_require_bound_flight_manager(store: RecordStore, scheduler) -> None:
    manager = AircraftManager(store, scheduler)
    manager.init()
    with pytest.raises(RuntimeError):
        manager.get_most_used_aircraft_blocking()


def test_flight_time_per_aircraft(aircraft_manager: AircraftManager, flight_manager: FlightManager) -> None:
    a = Aircraft("C-AAAA", Airframe.A319, "CFM56")
    b = Aircraft("C-BBBB", Airframe.B737_800, "CFM56-7B")
    for aircraft in (a, b):
        aircraft_manager.add_aircraft_blocking(aircraft)
    flight_manager.add_flight_blocking(_flight(a, 1))
    flight_manager.add_flight_blocking(_flight(a, 2))
    flight_manager.add_flight_blocking(_flight(b, 1.5))
    assert aircraft_manager.get_flight_time_blocking("C-AAAA") == timedelta(hours=3)
    assert aircraft_manager.get_flight_time_blocking("C-BBBB") == timedelta(hours=1.5)
    assert aircraft_manager.get_flight_time_blocking("C-NONE") == timedelta(0)


def test_most_used_aircraft(aircraft_manager: AircraftManager, flight_manager: FlightManager) -> None:
    assert aircraft_manager.get_most_used_aircraft_blocking() is None
    a = Aircraft("C-AAAA", Airframe.A319, "CFM56")
    b = Aircraft("C-BBBB", Airframe.B737_800, "CFM56-7B")
    for aircraft in (a, b):
        aircraft_manager.add_aircraft_blocking(aircraft)
    flight_manager.add_flight_blocking(_flight(a, 1))
    flight_manager.add_flight_blocking(_flight(b, 4))
    assert aircraft_manager.get_most_used_aircraft_blocking() == b


def test_most_used_aircraft_tie_goes_to_last_read(aircraft_manager: AircraftManager, flight_manager: FlightManager) -> None:
    a = Aircraft("C-AAAA", Airframe.A319, "CFM56")
    b = Aircraft("C-BBBB", Airframe.B737_800, "CFM56-7B")
    for aircraft in (a, b):
        aircraft_manager.add_aircraft_blocking(aircraft)
    last = aircraft_manager.get_all_aircraft_blocking()[-1]
    assert aircraft_manager.get_most_used_aircraft_blocking() == last
