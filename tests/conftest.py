from __future__ import annotations

import os
from concurrent.futures import Future
from pathlib import Path
from typing import Callable, List

import pytest

# Qt widgets require a platform plugin.  Offscreen avoids libGL dependencies
# inside the test container.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from modules.logbook.aircraft_manager import AircraftManager
from modules.logbook.flight_manager import FlightManager
from utils.db import RecordStore


class _RecordedTask:
    def __init__(self, work: Callable[[], object], initial_delay_ms: int, interval_ms: int) -> None:
        self.work = work
        self.initial_delay_ms = initial_delay_ms
        self.interval_ms = interval_ms
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if not self.cancelled:
            self.work()


class InlineScheduler:
    """Runs async work immediately on the calling thread.

    Repeating tasks are recorded instead of started; tests call ``fire()``.
    """

    def __init__(self) -> None:
        self.repeating: List[_RecordedTask] = []
        self.closed = False

    def run_async(self, work: Callable[[], object]) -> Future:
        if self.closed:
            raise RuntimeError("Scheduler has been shut down")
        future: Future = Future()
        try:
            future.set_result(work())
        except Exception as exc:
            future.set_exception(exc)
        return future

    def run_repeating(self, work, initial_delay_ms: int, interval_ms: int) -> _RecordedTask:
        task = _RecordedTask(work, initial_delay_ms, interval_ms)
        self.repeating.append(task)
        return task

    def cancel_all(self) -> None:
        for task in self.repeating:
            task.cancel()

    def shutdown(self, grace=None) -> None:
        self.cancel_all()
        self.closed = True


@pytest.fixture()
def scheduler() -> InlineScheduler:
    return InlineScheduler()


@pytest.fixture()
def store(tmp_path: Path) -> RecordStore:
    return RecordStore(tmp_path / "logbook.db")


@pytest.fixture()
def aircraft_manager(store: RecordStore, scheduler: InlineScheduler) -> AircraftManager:
    manager = AircraftManager(store, scheduler)
    assert manager.init()
    return manager


@pytest.fixture()
def flight_manager(store: RecordStore, scheduler: InlineScheduler, aircraft_manager: AircraftManager) -> FlightManager:
    manager = FlightManager(store, scheduler, aircraft_manager)
    assert manager.init()
    return manager
