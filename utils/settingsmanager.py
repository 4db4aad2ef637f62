import json
import logging
import os

logger = logging.getLogger(__name__)

DARK_MODE = "dark_mode"

DEFAULTS = {
    DARK_MODE: False,
}


class SettingsManager:
    """Flat key/value settings kept in a JSON file.

    Values live in memory after :meth:`load`; :meth:`save` writes them back.
    The logbook loads once at startup and saves once at exit.
    """

    def __init__(self, filename="config.json", defaults=None):
        self.filename = str(filename)
        self.defaults = dict(DEFAULTS if defaults is None else defaults)
        self.settings = {}
        self.loaded = self.load()

    def load(self):
        self.settings = dict(self.defaults)
        if os.path.exists(self.filename):
            try:
                with open(self.filename, "r", encoding="utf-8") as f:
                    stored = json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError):
                logger.warning("Failed to decode JSON from %s. Resetting settings.", self.filename)
                return self.save()
            except OSError:
                logger.exception("Unable to read settings from %s", self.filename)
                return False
            if not isinstance(stored, dict):
                logger.warning("Settings file %s is not a JSON object. Resetting settings.", self.filename)
                return self.save()
            self.settings.update(stored)
            return True
        return self.save()

    def save(self):
        try:
            parent = os.path.dirname(self.filename)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(self.filename, "w", encoding="utf-8") as f:
                json.dump(self.settings, f, indent=4)
        except OSError:
            logger.exception("An error occurred trying to write to %s", self.filename)
            return False
        return True

    def get(self, key, default=None):
        if default is None:
            default = self.defaults.get(key)
        return self.settings.get(key, default)

    def get_bool(self, key):
        value = self.get(key)
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return bool(value)

    def set(self, key, value):
        self.settings[key] = value
