"""Reference data for airframe models and their weight classes.

The catalog is compiled in and never persisted.  Aircraft rows store the
member name of :class:`Airframe` (``"A320_NEO"``); :meth:`Airframe.from_stored`
and :attr:`Airframe.stored_value` are the only sanctioned conversions between
the two; an unknown value raises :class:`UnknownAirframeError`.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

_INT_MAX = 2**31 - 1


class UnknownAirframeError(LookupError):
    """Raised when a stored airframe value is not part of the catalog."""

    def __init__(self, values: List[str]) -> None:
        self.values = list(values)
        joined = ", ".join(repr(v) for v in self.values)
        super().__init__(f"Unrecognised airframe value(s): {joined}")


class WeightClass(Enum):
    SPECIAL = ("SPECIAL", 0, _INT_MAX)
    HEAVY = ("Heavy", 300_000, _INT_MAX)
    LARGE = ("Large", 41_000, 300_000)
    MEDIUM = ("Medium", 12_500, 41_000)
    SMALL = ("Small", 0, 12_500)
    UNKNOWN = ("UNKNOWN", -1, -1)

    def __init__(self, display_name: str, min_weight_lbs: int, max_weight_lbs: int) -> None:
        self.display_name = display_name
        self.min_weight_lbs = min_weight_lbs
        self.max_weight_lbs = max_weight_lbs

    def contains(self, weight_lbs: int) -> bool:
        if self.min_weight_lbs < 0:
            return False
        return self.min_weight_lbs <= weight_lbs < self.max_weight_lbs

    @classmethod
    def for_weight(cls, weight_lbs: int) -> "WeightClass":
        """Return the band for a maximum takeoff weight.

        SPECIAL is assigned per airframe, never derived from weight.
        """
        for band in (cls.HEAVY, cls.LARGE, cls.MEDIUM, cls.SMALL):
            if band.contains(weight_lbs):
                return band
        return cls.UNKNOWN


class Airframe(Enum):
    # Airbus
    A318 = ("Airbus", "A318", WeightClass.LARGE)
    A319 = ("Airbus", "A319", WeightClass.LARGE)
    A319_NEO = ("Airbus", "A319neo", WeightClass.LARGE)
    A320 = ("Airbus", "A320", WeightClass.LARGE)
    A320_NEO = ("Airbus", "A320neo", WeightClass.LARGE)
    A321 = ("Airbus", "A321", WeightClass.LARGE)
    A321_NEO = ("Airbus", "A321neo", WeightClass.LARGE)
    A330_200 = ("Airbus", "A330-200", WeightClass.HEAVY)
    A330_300 = ("Airbus", "A330-300", WeightClass.HEAVY)
    A330_800 = ("Airbus", "A330-800", WeightClass.HEAVY)
    A330_900 = ("Airbus", "A330-900", WeightClass.HEAVY)
    A350_900 = ("Airbus", "A350-900", WeightClass.HEAVY)
    A350_1000 = ("Airbus", "A350-1000", WeightClass.HEAVY)
    A380 = ("Airbus", "A380", WeightClass.SPECIAL)

    # Boeing
    B737_700 = ("Boeing", "B737-700", WeightClass.LARGE)
    B737_800 = ("Boeing", "B737-800", WeightClass.LARGE)
    B737_900 = ("Boeing", "B737-900", WeightClass.LARGE)
    B737_MAX_7 = ("Boeing", "B737 MAX 7", WeightClass.LARGE)
    B737_MAX_8 = ("Boeing", "B737 MAX 8", WeightClass.LARGE)
    B737_MAX_9 = ("Boeing", "B737 MAX 9", WeightClass.LARGE)
    B737_MAX_10 = ("Boeing", "B737 MAX 10", WeightClass.LARGE)
    B747_8 = ("Boeing", "B747-8", WeightClass.HEAVY)
    B777_200LR = ("Boeing", "B777-200LR", WeightClass.HEAVY)
    B777_300ER = ("Boeing", "B777-300ER", WeightClass.HEAVY)
    B777X = ("Boeing", "B777X", WeightClass.HEAVY)
    B787_8 = ("Boeing", "B787-8", WeightClass.HEAVY)
    B787_9 = ("Boeing", "B787-9", WeightClass.HEAVY)
    B787_10 = ("Boeing", "B787-10", WeightClass.HEAVY)

    def __init__(self, manufacturer: str, display_name: str, weight_class: WeightClass) -> None:
        self.manufacturer = manufacturer
        self.display_name = display_name
        self.weight_class = weight_class

    @property
    def full_name(self) -> str:
        return f"{self.manufacturer} {self.display_name}"

    @property
    def stored_value(self) -> str:
        """Value written to the ``aircraft.airframe`` column."""
        return self.name

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    @classmethod
    def from_stored(cls, value: str) -> "Airframe":
        airframe = _STORED.get(value)
        if airframe is None:
            raise UnknownAirframeError([value])
        return airframe

    @classmethod
    def by_name(cls, name: str) -> Optional["Airframe"]:
        wanted = (name or "").strip()
        for airframe in cls:
            if airframe.display_name.strip() == wanted:
                return airframe
        return None

    @classmethod
    def by_full_name(cls, full_name: str) -> Optional["Airframe"]:
        wanted = (full_name or "").strip()
        for airframe in cls:
            if airframe.full_name.strip() == wanted:
                return airframe
        return None

    @classmethod
    def by_manufacturer(cls, manufacturer: str) -> List["Airframe"]:
        wanted = (manufacturer or "").strip()
        return [a for a in cls if a.manufacturer.strip() == wanted]

    @classmethod
    def manufacturers(cls) -> List[str]:
        seen: List[str] = []
        for airframe in cls:
            if airframe.manufacturer not in seen:
                seen.append(airframe.manufacturer)
        return seen


_STORED: Dict[str, Airframe] = {a.stored_value: a for a in Airframe}


def validate_catalog() -> None:
    """Check that every airframe maps one-to-one in both directions."""

    problems: List[str] = []
    for label, key in (
        ("stored value", lambda a: a.stored_value),
        ("name", lambda a: a.display_name),
        ("full name", lambda a: a.full_name),
    ):
        seen: Dict[str, Airframe] = {}
        for airframe in Airframe:
            value = key(airframe)
            if value in seen:
                problems.append(f"duplicate {label} {value!r} ({seen[value].name}, {airframe.name})")
            seen[value] = airframe
    for airframe in Airframe:
        if Airframe.from_stored(airframe.stored_value) is not airframe:
            problems.append(f"stored value {airframe.stored_value!r} does not round-trip")
        if airframe.weight_class is WeightClass.UNKNOWN:
            problems.append(f"{airframe.name} has no weight class")
    if problems:
        raise ValueError("Invalid airframe catalog: " + "; ".join(problems))


__all__ = ["Airframe", "WeightClass", "UnknownAirframeError", "validate_catalog"]
