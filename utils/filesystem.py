import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

APP_DIR_NAME = "FlightLogbook"


def working_dir():
    """Directory holding the logbook database, settings and exports.

    ``LOGBOOK_DATA_DIR`` wins, then ``%APPDATA%/FlightLogbook`` on Windows,
    then ``~/.flight_logbook``.
    """
    override = os.environ.get("LOGBOOK_DATA_DIR")
    if override:
        return Path(override)
    appdata = os.environ.get("APPDATA")
    if appdata:
        return Path(appdata) / APP_DIR_NAME
    return Path.home() / ".flight_logbook"


def ensure_working_dir():
    path = working_dir()
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError:
        logger.exception("Unable to create working directory %s", path)
        return None
    return path
