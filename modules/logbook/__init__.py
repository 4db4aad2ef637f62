"""Logbook module public API."""

__all__ = [
    "AircraftManager",
    "FlightManager",
    "export_table",
]


def __getattr__(name: str):
    if name == "AircraftManager":
        from .aircraft_manager import AircraftManager

        return AircraftManager
    if name == "FlightManager":
        from .flight_manager import FlightManager

        return FlightManager
    if name == "export_table":
        from .exporters.csv_exporter import export_table

        return export_table
    raise AttributeError(name)
