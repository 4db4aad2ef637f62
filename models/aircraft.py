"""Aircraft record as stored in the logbook database."""

from __future__ import annotations

from dataclasses import dataclass

from models.airframe import Airframe


@dataclass(frozen=True, slots=True)
class Aircraft:
    """A specific tail: registration, airframe model and engine."""

    registration: str
    airframe: Airframe
    engine: str

    def __str__(self) -> str:
        return f"{self.airframe.full_name} {self.engine} ({self.registration})"


__all__ = ["Aircraft"]
