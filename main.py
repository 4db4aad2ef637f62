# ===== Part 1: Imports & Logging ============================================
import logging
import os
import sys
from typing import Optional

from PySide6.QtWidgets import QApplication

from models.airframe import UnknownAirframeError, validate_catalog
from modules.logbook.aircraft_manager import AircraftManager
from modules.logbook.flight_manager import FlightManager
from ui.logbook_window import LogbookWindow
from ui.theme import ThemeManager
from utils.app_signals import LogbookSignals, QtDispatcher
from utils.db import RecordStore
from utils.filesystem import ensure_working_dir
from utils.scheduler import Scheduler
from utils.settingsmanager import DARK_MODE, SettingsManager

logger = logging.getLogger(__name__)

SETTINGS_FILE = "config.json"
DATABASE_FILE = "logbook.db"


def configure_logging() -> None:
    level_name = os.environ.get("LOGBOOK_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )


# ===== Part 2: Startup ======================================================
class StartupError(RuntimeError):
    """Raised when the logbook cannot start; the message is user-facing."""


class Logbook:
    """Everything the window needs, wired together in startup order."""

    def __init__(self, settings, store, scheduler, dispatcher, aircraft, flights):
        self.settings = settings
        self.store = store
        self.scheduler = scheduler
        self.dispatcher = dispatcher
        self.aircraft = aircraft
        self.flights = flights

    def shutdown(self) -> None:
        logger.info("Shutting down")
        if not self.settings.save():
            logger.error("Settings could not be saved")
        self.scheduler.cancel_all()
        self.scheduler.shutdown()


def start_logbook(dispatcher=None) -> Logbook:
    """Build the store, scheduler and managers.  Raises :class:`StartupError`."""

    directory = ensure_working_dir()
    if directory is None:
        raise StartupError("Could not create the logbook working directory")
    logger.info("Using working directory %s", directory)

    settings = SettingsManager(directory / SETTINGS_FILE)
    if not settings.loaded:
        logger.warning("Running with default settings")

    store = RecordStore(directory / DATABASE_FILE)
    if not store.test_connection():
        raise StartupError(f"Could not connect to the database at {store.db_path}")

    scheduler = Scheduler()
    try:
        validate_catalog()
        aircraft = AircraftManager(store, scheduler, dispatcher)
        flights = FlightManager(store, scheduler, aircraft, dispatcher)
        if not aircraft.init() or not flights.init():
            raise StartupError("Could not create the logbook tables")
        aircraft.verify_stored_airframes()
    except (UnknownAirframeError, ValueError) as exc:
        scheduler.shutdown()
        raise StartupError(str(exc)) from exc
    except StartupError:
        scheduler.shutdown()
        raise

    return Logbook(settings, store, scheduler, dispatcher, aircraft, flights)


# ===== Part 3: Entry Point ==================================================
def main(argv: Optional[list] = None) -> int:
    configure_logging()
    app = QApplication(sys.argv if argv is None else argv)
    dispatcher = QtDispatcher()

    try:
        logbook = start_logbook(dispatcher)
    except StartupError:
        logger.exception("Flight logbook failed to start")
        return 1

    theme = ThemeManager(app, logbook.settings.get_bool(DARK_MODE))
    signals = LogbookSignals()
    window = LogbookWindow(
        logbook.aircraft,
        logbook.flights,
        logbook.scheduler,
        logbook.settings,
        theme,
        signals,
    )
    app.aboutToQuit.connect(logbook.shutdown)
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
