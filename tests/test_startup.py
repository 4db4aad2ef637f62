from __future__ import annotations

from pathlib import Path

import pytest

import main
from utils.db import RecordStore


@pytest.fixture()
def data_dir(tmp_path: Path, monkeypatch) -> Path:
    path = tmp_path / "data"
    monkeypatch.setenv("LOGBOOK_DATA_DIR", str(path))
    return path


def test_start_logbook_creates_files(data_dir: Path) -> None:
    logbook = main.start_logbook()
    try:
        assert (data_dir / main.SETTINGS_FILE).exists()
        assert (data_dir / main.DATABASE_FILE).exists()
        assert logbook.flights.get_flight_count_blocking() == 0
        assert logbook.aircraft.get_most_used_aircraft_blocking() is None
    finally:
        logbook.shutdown()
    assert logbook.scheduler.closed


def test_unknown_stored_airframe_is_fatal(data_dir: Path) -> None:
    store = RecordStore(data_dir / main.DATABASE_FILE)
    store.create_table(
        "aircraft",
        ("registration", "airframe", "engine"),
        ("TEXT NOT NULL UNIQUE", "TEXT", "TEXT"),
        "PRIMARY KEY (registration)",
    )
    store.upsert_row("aircraft", "registration", "G-BOAC", {"airframe": "CONCORDE", "engine": "Olympus"})
    with pytest.raises(main.StartupError):
        main.start_logbook()


def test_unusable_database_is_fatal(data_dir: Path) -> None:
    (data_dir / main.DATABASE_FILE).mkdir(parents=True)
    with pytest.raises(main.StartupError):
        main.start_logbook()
