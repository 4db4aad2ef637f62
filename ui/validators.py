"""Input checks for the logbook forms.

Pure Python so the rules can be tested without a display.  Each check raises
:class:`FormError` carrying the message shown to the user.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from models.aircraft import Aircraft
from models.airframe import Airframe
from models.flight import datetime_to_millis, parse_date

INVALID_REGISTRATION = "Invalid Input; An invalid aircraft registration was provided"
INVALID_AIRFRAME = "Invalid Input; An invalid airframe was provided"
INVALID_ENGINE = "Invalid Input; An invalid engine was provided"

INVALID_AIRCRAFT = "Invalid Input; An invalid or no aircraft is selected"
INVALID_FLIGHT_NUMBER = "Invalid Input; An invalid flight number was provided"
INVALID_DEPARTURE = "Invalid Input; An invalid departure ICAO code was provided"
INVALID_ARRIVAL = "Invalid Input; An invalid arrival ICAO code was provided"
INVALID_DEPARTURE_DATE = "Invalid Input; An invalid departure date was provided"
INVALID_ARRIVAL_DATE = "Invalid Input; An invalid arrival date was provided"

SUCCESS_FLIGHT = "Successfully logged flight"
FAILED_FLIGHT = "Failed to log flight"
NO_FLIGHT_SELECTED = "You do not have a logged flight selected"

SUCCESS_ADD_AIRCRAFT = "Successfully added aircraft"
FAILED_ADD_AIRCRAFT = "Failed to add aircraft"
NO_AIRCRAFT_SELECTED = "You do not have an aircraft selected"


class FormError(ValueError):
    """Raised when form input cannot be turned into a record."""


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def validate_aircraft_form(registration: str, airframe: str, engine: str) -> Aircraft:
    """Build an :class:`Aircraft` from the aircraft form fields.

    ``airframe`` is the full name shown in the combo box, e.g. ``"Airbus A320"``.
    """

    if _blank(registration):
        raise FormError(INVALID_REGISTRATION)
    if _blank(airframe):
        raise FormError(INVALID_AIRFRAME)
    if _blank(engine):
        raise FormError(INVALID_ENGINE)
    found = Airframe.by_full_name(airframe)
    if found is None:
        raise FormError(INVALID_AIRFRAME)
    return Aircraft(registration=registration.strip(), airframe=found, engine=engine.strip())


@dataclass(frozen=True)
class FlightForm:
    """Validated flight form; the aircraft is still a bare registration."""

    registration: str
    flight_number: str
    departure: str
    arrival: str
    departure_time_millis: int
    arrival_time_millis: int


def validate_flight_form(
    registration: Optional[str],
    flight_number: str,
    departure: str,
    arrival: str,
    departure_date: str,
    arrival_date: str,
) -> FlightForm:
    """Check the flight form.

    ``registration`` is the item data of the selected aircraft, ``None`` when
    nothing is selected.
    """

    if _blank(registration):
        raise FormError(INVALID_AIRCRAFT)
    if _blank(flight_number):
        raise FormError(INVALID_FLIGHT_NUMBER)
    if _blank(departure):
        raise FormError(INVALID_DEPARTURE)
    if _blank(arrival):
        raise FormError(INVALID_ARRIVAL)
    if _blank(departure_date):
        raise FormError(INVALID_DEPARTURE_DATE)
    if _blank(arrival_date):
        raise FormError(INVALID_ARRIVAL_DATE)

    try:
        dep_time = parse_date(departure_date)
    except ValueError as exc:
        raise FormError(INVALID_DEPARTURE_DATE) from exc
    try:
        arr_time = parse_date(arrival_date)
    except ValueError as exc:
        raise FormError(INVALID_ARRIVAL_DATE) from exc

    return FlightForm(
        registration=registration,
        flight_number=flight_number.strip(),
        departure=departure.strip().upper(),
        arrival=arrival.strip().upper(),
        departure_time_millis=datetime_to_millis(dep_time),
        arrival_time_millis=datetime_to_millis(arr_time),
    )


__all__ = [
    "FormError",
    "FlightForm",
    "validate_aircraft_form",
    "validate_flight_form",
]
