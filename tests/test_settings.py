from __future__ import annotations

import json
from pathlib import Path

from utils.filesystem import ensure_working_dir, working_dir
from utils.settingsmanager import DARK_MODE, SettingsManager


def test_missing_file_is_created_with_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    settings = SettingsManager(path)
    assert settings.loaded
    assert settings.get_bool(DARK_MODE) is False
    assert json.loads(path.read_text(encoding="utf-8")) == {DARK_MODE: False}


def test_set_is_not_persisted_until_save(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    settings = SettingsManager(path)
    settings.set(DARK_MODE, True)
    assert SettingsManager(path).get_bool(DARK_MODE) is False
    assert settings.save()
    assert SettingsManager(path).get_bool(DARK_MODE) is True


def test_corrupt_file_is_reset(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    settings = SettingsManager(path)
    assert settings.get_bool(DARK_MODE) is False
    assert json.loads(path.read_text(encoding="utf-8")) == {DARK_MODE: False}


def test_non_object_file_is_reset(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")
    assert SettingsManager(path).get(DARK_MODE) is False


def test_string_booleans(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({DARK_MODE: "true"}), encoding="utf-8")
    assert SettingsManager(path).get_bool(DARK_MODE) is True


def test_working_dir_override(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("LOGBOOK_DATA_DIR", str(tmp_path / "data"))
    assert working_dir() == tmp_path / "data"
    created = ensure_working_dir()
    assert created == tmp_path / "data"
    assert created.is_dir()


def test_working_dir_falls_back_to_appdata(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv("LOGBOOK_DATA_DIR", raising=False)
    monkeypatch.setenv("APPDATA", str(tmp_path))
    assert working_dir() == tmp_path / "FlightLogbook"


def test_working_dir_falls_back_to_home(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv("LOGBOOK_DATA_DIR", raising=False)
    monkeypatch.delenv("APPDATA", raising=False)
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
    assert working_dir() == tmp_path / ".flight_logbook"
