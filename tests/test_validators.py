from __future__ import annotations

import pytest

from models.airframe import Airframe
from ui.validators import (
    INVALID_AIRCRAFT,
    INVALID_AIRFRAME,
    INVALID_ARRIVAL,
    INVALID_ARRIVAL_DATE,
    INVALID_DEPARTURE,
    INVALID_DEPARTURE_DATE,
    INVALID_ENGINE,
    INVALID_FLIGHT_NUMBER,
    INVALID_REGISTRATION,
    FormError,
    validate_aircraft_form,
    validate_flight_form,
)

GOOD_FLIGHT = dict(
    registration="C-FXCD",
    flight_number="AC100",
    departure="cyyz",
    arrival="KJFK",
    departure_date="2024/05/01 13:00 +00:00",
    arrival_date="2024/05/01 14:30 +00:00",
)


def test_valid_aircraft_form() -> None:
    aircraft = validate_aircraft_form(" C-FXCD ", "Airbus A320", "CFM56")
    assert aircraft.registration == "C-FXCD"
    assert aircraft.airframe is Airframe.A320


@pytest.mark.parametrize(
    "fields, message",
    [
        (("", "Airbus A320", "CFM56"), INVALID_REGISTRATION),
        (("C-FXCD", "", "CFM56"), INVALID_AIRFRAME),
        (("C-FXCD", "Airbus A320", "  "), INVALID_ENGINE),
        (("C-FXCD", "Cessna 172", "O-320"), INVALID_AIRFRAME),
    ],
)
def test_invalid_aircraft_form(fields, message) -> None:
    with pytest.raises(FormError) as info:
        validate_aircraft_form(*fields)
    assert str(info.value) == message


def test_valid_flight_form() -> None:
    form = validate_flight_form(**GOOD_FLIGHT)
    assert form.registration == "C-FXCD"
    assert form.departure == "CYYZ"
    assert form.arrival_time_millis - form.departure_time_millis == 90 * 60 * 1000


def test_flight_form_keeps_registration_with_parentheses() -> None:
    form = validate_flight_form(**dict(GOOD_FLIGHT, registration="N(1)"))
    assert form.registration == "N(1)"


@pytest.mark.parametrize(
    "field, value, message",
    [
        ("registration", "", INVALID_AIRCRAFT),
        ("registration", None, INVALID_AIRCRAFT),
        ("flight_number", "", INVALID_FLIGHT_NUMBER),
        ("departure", "", INVALID_DEPARTURE),
        ("arrival", " ", INVALID_ARRIVAL),
        ("departure_date", "", INVALID_DEPARTURE_DATE),
        ("departure_date", "yesterday", INVALID_DEPARTURE_DATE),
        ("arrival_date", "", INVALID_ARRIVAL_DATE),
        ("arrival_date", "2024-05-01", INVALID_ARRIVAL_DATE),
    ],
)
def test_invalid_flight_form(field, value, message) -> None:
    fields = dict(GOOD_FLIGHT, **{field: value})
    with pytest.raises(FormError) as info:
        validate_flight_form(**fields)
    assert str(info.value) == message
