from __future__ import annotations

"""Main window of the flight logbook.

Three tabs (flights, aircraft, statistics) over the two managers.  All data
access goes through the managers' async methods; their callbacks arrive on the
GUI thread through the dispatcher the managers were built with.
"""

import logging
import uuid
from typing import Any, Callable, List, Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QCloseEvent, QKeySequence
from PySide6.QtWidgets import (
    QAbstractItemView,
    QComboBox,
    QFileDialog,
    QFormLayout,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QMainWindow,
    QPushButton,
    QTableView,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from models.aircraft import Aircraft
from models.airframe import Airframe
from models.flight import Flight, format_date
from modules.logbook.aircraft_manager import AircraftManager
from modules.logbook.flight_manager import FlightManager
from ui import dialogs
from ui.table_models import AircraftTableModel, FlightTableModel
from ui.theme import ThemeManager
from ui.validators import (
    FAILED_ADD_AIRCRAFT,
    FAILED_FLIGHT,
    INVALID_AIRCRAFT,
    NO_AIRCRAFT_SELECTED,
    NO_FLIGHT_SELECTED,
    SUCCESS_ADD_AIRCRAFT,
    SUCCESS_FLIGHT,
    FlightForm,
    FormError,
    validate_aircraft_form,
    validate_flight_form,
)
from utils.app_signals import LogbookSignals
from utils.scheduler import Scheduler, ScheduledTask
from utils.settingsmanager import DARK_MODE, SettingsManager
from utils.timefmt import format_duration

logger = logging.getLogger(__name__)

TITLE = "My Logbook"
WIDTH, HEIGHT = 1000, 700
STATS_REFRESH_MS = 60_000
DATE_PLACEHOLDER = "yyyy/MM/dd HH:mm +00:00"
NONE_TEXT = "None"


class LogbookWindow(QMainWindow):
    def __init__(
        self,
        aircraft: AircraftManager,
        flights: FlightManager,
        scheduler: Scheduler,
        settings: SettingsManager,
        theme: ThemeManager,
        signals: Optional[LogbookSignals] = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._aircraft = aircraft
        self._flights = flights
        self._scheduler = scheduler
        self._settings = settings
        self._theme = theme
        self.signals = signals or LogbookSignals(self)
        self._stats_task: Optional[ScheduledTask] = None

        self.setWindowTitle(TITLE)
        self.resize(WIDTH, HEIGHT)

        self.flight_model = FlightTableModel(parent=self)
        self.aircraft_model = AircraftTableModel(parent=self)

        self.tabs = QTabWidget(self)
        self.tabs.addTab(self._build_flights_tab(), "Flights")
        self.tabs.addTab(self._build_aircraft_tab(), "Aircraft")
        self.tabs.addTab(self._build_statistics_tab(), "Statistics")
        self.setCentralWidget(self.tabs)
        self._build_menus()

        self.signals.aircraftChanged.connect(self._on_aircraft_changed)
        self.signals.flightsChanged.connect(self._on_flights_changed)
        self.signals.darkModeChanged.connect(self._on_dark_mode_changed)

        self.refresh_content()
        self._stats_task = self._scheduler.run_repeating(
            self.refresh_statistics, STATS_REFRESH_MS, STATS_REFRESH_MS
        )

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------
    def _make_table(self, model) -> QTableView:
        table = QTableView(self)
        table.setModel(model)
        table.setSelectionBehavior(QAbstractItemView.SelectRows)
        table.setSelectionMode(QAbstractItemView.SingleSelection)
        table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        table.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        table.verticalHeader().setVisible(False)
        return table

    def _build_flights_tab(self) -> QWidget:
        page = QWidget(self)
        layout = QVBoxLayout(page)
        layout.addWidget(QLabel("<b><u>Flight Logbook:</u></b>"))
        self.flights_table = self._make_table(self.flight_model)
        layout.addWidget(self.flights_table, 1)

        form = QFormLayout()
        self.aircraft_combo = QComboBox()
        self.flight_number_edit = QLineEdit()
        self.departure_edit = QLineEdit()
        self.departure_edit.setPlaceholderText("ICAO, e.g. CYYZ")
        self.arrival_edit = QLineEdit()
        self.arrival_edit.setPlaceholderText("ICAO, e.g. KJFK")
        self.departure_time_edit = QLineEdit()
        self.departure_time_edit.setPlaceholderText(DATE_PLACEHOLDER)
        self.arrival_time_edit = QLineEdit()
        self.arrival_time_edit.setPlaceholderText(DATE_PLACEHOLDER)
        form.addRow("Aircraft", self.aircraft_combo)
        form.addRow("Flight Number", self.flight_number_edit)
        form.addRow("Departure", self.departure_edit)
        form.addRow("Arrival", self.arrival_edit)
        form.addRow("Departure Time", self.departure_time_edit)
        form.addRow("Arrival Time", self.arrival_time_edit)
        layout.addLayout(form)

        buttons = QHBoxLayout()
        self.log_flight_button = QPushButton("Log flight")
        self.log_flight_button.clicked.connect(self.log_flight)
        self.remove_flight_button = QPushButton("Remove selected")
        self.remove_flight_button.clicked.connect(self.remove_selected_flight)
        buttons.addStretch(1)
        buttons.addWidget(self.log_flight_button)
        buttons.addWidget(self.remove_flight_button)
        layout.addLayout(buttons)
        return page

    def _build_aircraft_tab(self) -> QWidget:
        page = QWidget(self)
        layout = QVBoxLayout(page)
        layout.addWidget(QLabel("<b><u>Aircraft:</u></b>"))
        self.aircraft_table = self._make_table(self.aircraft_model)
        layout.addWidget(self.aircraft_table, 1)

        form = QFormLayout()
        self.registration_edit = QLineEdit()
        self.airframe_combo = QComboBox()
        for airframe in Airframe:
            self.airframe_combo.addItem(airframe.full_name, airframe)
        self.engine_edit = QLineEdit()
        form.addRow("Registration", self.registration_edit)
        form.addRow("Airframe", self.airframe_combo)
        form.addRow("Engine", self.engine_edit)
        layout.addLayout(form)

        buttons = QHBoxLayout()
        self.add_aircraft_button = QPushButton("Add aircraft")
        self.add_aircraft_button.clicked.connect(self.add_aircraft)
        self.remove_aircraft_button = QPushButton("Remove selected")
        self.remove_aircraft_button.clicked.connect(self.remove_selected_aircraft)
        buttons.addStretch(1)
        buttons.addWidget(self.add_aircraft_button)
        buttons.addWidget(self.remove_aircraft_button)
        layout.addLayout(buttons)
        return page

    def _build_statistics_tab(self) -> QWidget:
        page = QWidget(self)
        form = QFormLayout(page)
        form.setLabelAlignment(Qt.AlignRight)
        self.total_time_label = QLabel(format_duration(None))
        self.flight_count_label = QLabel("0")
        self.longest_flight_label = QLabel(NONE_TEXT)
        self.most_used_aircraft_label = QLabel(NONE_TEXT)
        self.most_freq_dep_label = QLabel(NONE_TEXT)
        self.most_freq_arr_label = QLabel(NONE_TEXT)
        form.addRow("Total flight time:", self.total_time_label)
        form.addRow("Flights logged:", self.flight_count_label)
        form.addRow("Longest flight:", self.longest_flight_label)
        form.addRow("Most used aircraft:", self.most_used_aircraft_label)
        form.addRow("Most frequent departure:", self.most_freq_dep_label)
        form.addRow("Most frequent arrival:", self.most_freq_arr_label)
        return page

    def _build_menus(self) -> None:
        file_menu = self.menuBar().addMenu("&File")
        export_flights = QAction("Export flights…", self)
        export_flights.triggered.connect(lambda: self.export_table(self._flights, "flights"))
        export_aircraft = QAction("Export aircraft…", self)
        export_aircraft.triggered.connect(lambda: self.export_table(self._aircraft, "aircraft"))
        quit_action = QAction("Quit", self)
        quit_action.setShortcut(QKeySequence.Quit)
        quit_action.triggered.connect(self.close)
        file_menu.addAction(export_flights)
        file_menu.addAction(export_aircraft)
        file_menu.addSeparator()
        file_menu.addAction(quit_action)

        view_menu = self.menuBar().addMenu("&View")
        self.dark_mode_action = QAction("Dark mode", self)
        self.dark_mode_action.setCheckable(True)
        self.dark_mode_action.setChecked(self._settings.get_bool(DARK_MODE))
        self.dark_mode_action.toggled.connect(self.signals.darkModeChanged)
        view_menu.addAction(self.dark_mode_action)

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------
    def refresh_content(self) -> None:
        self._aircraft.get_all_aircraft(self._populate_aircraft)
        self._flights.get_flights(self.flight_model.refresh)
        self.refresh_statistics()

    def _populate_aircraft(self, aircraft: List[Aircraft]) -> None:
        self.aircraft_model.refresh(aircraft)
        current = self.aircraft_combo.currentData()
        self.aircraft_combo.clear()
        for item in aircraft:
            self.aircraft_combo.addItem(str(item), item.registration)
        index = self.aircraft_combo.findData(current)
        if index >= 0:
            self.aircraft_combo.setCurrentIndex(index)

    def refresh_statistics(self) -> None:
        """Reload the statistics tab.  Also called from the scheduler's timer thread."""

        if self._scheduler.closed:
            return
        self._flights.get_total_flight_time(
            lambda total: self.total_time_label.setText(format_duration(total))
        )
        self._flights.get_flight_count(
            lambda count: self.flight_count_label.setText(str(max(count, 0)))
        )
        self._flights.get_longest_flight(
            lambda flight: self.longest_flight_label.setText(self._describe_flight(flight))
        )
        self._aircraft.get_most_used_aircraft(
            lambda aircraft: self.most_used_aircraft_label.setText(
                str(aircraft) if aircraft is not None else NONE_TEXT
            )
        )
        self._flights.get_most_frequent_departure(
            lambda icao: self.most_freq_dep_label.setText(icao or NONE_TEXT)
        )
        self._flights.get_most_frequent_arrival(
            lambda icao: self.most_freq_arr_label.setText(icao or NONE_TEXT)
        )

    @staticmethod
    def _describe_flight(flight: Optional[Flight]) -> str:
        if flight is None:
            return NONE_TEXT
        return (
            f"{flight.flight_number} {flight.departure} -> {flight.arrival} "
            f"({format_duration(flight.flight_time)})"
        )

    def _on_aircraft_changed(self, registration: str) -> None:
        logger.debug("Aircraft %s changed; reloading", registration)
        self.refresh_content()

    def _on_flights_changed(self, flight_id: str) -> None:
        logger.debug("Flight %s changed; reloading", flight_id)
        self._flights.get_flights(self.flight_model.refresh)
        self.refresh_statistics()

    def _on_dark_mode_changed(self, enabled: bool) -> None:
        self._theme.set_dark_mode(enabled)
        self._settings.set(DARK_MODE, bool(enabled))
        if self.dark_mode_action.isChecked() != enabled:
            self.dark_mode_action.setChecked(enabled)

    # ------------------------------------------------------------------
    # Aircraft actions
    # ------------------------------------------------------------------
    def add_aircraft(self) -> None:
        try:
            aircraft = validate_aircraft_form(
                self.registration_edit.text(),
                self.airframe_combo.currentText(),
                self.engine_edit.text(),
            )
        except FormError as exc:
            dialogs.show_error(self, str(exc))
            return

        def done(ok: bool) -> None:
            if not ok:
                dialogs.show_error(self, FAILED_ADD_AIRCRAFT)
                return
            self.registration_edit.clear()
            self.engine_edit.clear()
            self.signals.aircraftChanged.emit(aircraft.registration)
            dialogs.show_success(self, SUCCESS_ADD_AIRCRAFT)

        self._aircraft.add_aircraft(aircraft, done)

    def selected_aircraft(self) -> Optional[Aircraft]:
        rows = self.aircraft_table.selectionModel().selectedRows()
        if not rows:
            return None
        return self.aircraft_model.record(rows[0].row())

    def remove_selected_aircraft(self) -> None:
        aircraft = self.selected_aircraft()
        if aircraft is None:
            dialogs.show_error(self, NO_AIRCRAFT_SELECTED)
            return
        registration = aircraft.registration
        if not dialogs.confirm(self, f"Are you sure you would like to delete this aircraft? ({registration})"):
            return

        def done(ok: bool) -> None:
            if ok:
                self.signals.aircraftChanged.emit(registration)
                dialogs.show_success(self, f"Successfully deleted {registration}")
            else:
                dialogs.show_error(
                    self, f"An error occurred trying to delete {registration} please try again"
                )

        self._aircraft.remove_aircraft(registration, done)

    # ------------------------------------------------------------------
    # Flight actions
    # ------------------------------------------------------------------
    def log_flight(self) -> None:
        try:
            form = validate_flight_form(
                self.aircraft_combo.currentData(),
                self.flight_number_edit.text(),
                self.departure_edit.text(),
                self.arrival_edit.text(),
                self.departure_time_edit.text(),
                self.arrival_time_edit.text(),
            )
        except FormError as exc:
            dialogs.show_error(self, str(exc))
            return
        self._aircraft.get_aircraft(form.registration, lambda found: self._log_flight_for(form, found))

    def _log_flight_for(self, form: FlightForm, aircraft: Optional[Aircraft]) -> None:
        if aircraft is None:
            dialogs.show_error(self, INVALID_AIRCRAFT)
            return
        flight = Flight(
            id=uuid.uuid4(),
            flight_number=form.flight_number,
            departure=form.departure,
            arrival=form.arrival,
            departure_time_millis=form.departure_time_millis,
            arrival_time_millis=form.arrival_time_millis,
            aircraft=aircraft,
        )

        def done(ok: bool) -> None:
            if not ok:
                dialogs.show_error(self, FAILED_FLIGHT)
                return
            for edit in (
                self.flight_number_edit,
                self.departure_edit,
                self.arrival_edit,
                self.departure_time_edit,
                self.arrival_time_edit,
            ):
                edit.clear()
            self.signals.flightsChanged.emit(str(flight.id))
            dialogs.show_success(self, SUCCESS_FLIGHT)

        logger.info("Logging flight %s (%s)", flight.flight_number, format_date(flight.departure_date))
        self._flights.add_flight(flight, done)

    def selected_flight(self) -> Optional[Flight]:
        rows = self.flights_table.selectionModel().selectedRows()
        if not rows:
            return None
        return self.flight_model.record(rows[0].row())

    def remove_selected_flight(self) -> None:
        flight = self.selected_flight()
        if flight is None:
            dialogs.show_error(self, NO_FLIGHT_SELECTED)
            return
        if not dialogs.confirm(self, "Are you sure you would like to delete the selected flight log?"):
            return

        def done(ok: bool) -> None:
            if ok:
                self.signals.flightsChanged.emit(str(flight.id))
                dialogs.show_success(self, "Successfully deleted the selected flight log")
            else:
                dialogs.show_error(
                    self, "An error occurred trying to delete the selected flight log please try again"
                )

        self._flights.remove_flight(flight.id, done)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------
    def export_table(self, manager, label: str) -> None:
        directory = QFileDialog.getExistingDirectory(self, f"Export {label} to")
        if not directory:
            return

        def done(path: Any) -> None:
            if path is None:
                dialogs.show_error(self, f"Failed to export {label}")
            else:
                dialogs.show_success(self, f"Exported {label} to {path}")

        self._in_background(lambda: manager.export(directory), done)

    def _in_background(self, work: Callable[[], Any], callback: Callable[[Any], None]) -> None:
        dispatcher = self._flights.dispatcher

        def task() -> None:
            dispatcher.post(callback, work())

        self._scheduler.run_async(task)

    # ------------------------------------------------------------------
    def closeEvent(self, event: QCloseEvent) -> None:  # noqa: N802
        if self._stats_task is not None:
            self._stats_task.cancel()
            self._stats_task = None
        super().closeEvent(event)


__all__ = ["LogbookWindow"]
