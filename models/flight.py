"""Logged flight record and its date helpers."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from models.aircraft import Aircraft

UTC = timezone.utc

# yyyy/MM/dd HH:mm +HH:MM
DATE_FORMAT = "%Y/%m/%d %H:%M %z"


def format_date(value: datetime) -> str:
    """Render ``value`` as ``2024/05/01 13:45 +00:00``."""

    text = value.strftime(DATE_FORMAT)
    # strftime gives +0000; the logbook shows the offset with a colon
    return f"{text[:-2]}:{text[-2:]}"


def parse_date(text: str) -> datetime:
    """Parse a date rendered by :func:`format_date`.

    Offsets are accepted with or without the colon.  Raises ``ValueError``.
    """

    return datetime.strptime((text or "").strip(), DATE_FORMAT)


def millis_to_datetime(millis: int) -> datetime:
    return datetime(1970, 1, 1, tzinfo=UTC) + timedelta(milliseconds=millis)


def datetime_to_millis(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    delta = value - datetime(1970, 1, 1, tzinfo=UTC)
    return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000


@dataclass(frozen=True, slots=True)
class Flight:
    """One logbook entry.

    ``aircraft`` is resolved by registration when the row is read and may be
    ``None`` when that aircraft no longer exists.
    """

    id: uuid.UUID
    flight_number: str
    departure: str
    arrival: str
    departure_time_millis: int
    arrival_time_millis: int
    aircraft: Optional[Aircraft] = None

    @property
    def flight_time(self) -> timedelta:
        return timedelta(milliseconds=self.arrival_time_millis - self.departure_time_millis)

    @property
    def departure_date(self) -> datetime:
        return millis_to_datetime(self.departure_time_millis)

    @property
    def arrival_date(self) -> datetime:
        return millis_to_datetime(self.arrival_time_millis)

    @property
    def aircraft_label(self) -> str:
        return str(self.aircraft) if self.aircraft is not None else "Unknown aircraft"

    def __str__(self) -> str:
        return ",".join(
            (
                self.flight_number,
                f"{self.departure} -> {self.arrival}",
                f"{format_date(self.departure_date)}-{format_date(self.arrival_date)}",
                self.aircraft_label,
            )
        )


__all__ = [
    "Flight",
    "format_date",
    "parse_date",
    "millis_to_datetime",
    "datetime_to_millis",
    "DATE_FORMAT",
]
