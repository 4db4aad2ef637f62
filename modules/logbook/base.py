"""Shared plumbing for the logbook managers."""

from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Any, Callable, Optional

from utils.app_signals import DirectDispatcher, Dispatcher
from utils.db import RecordStore
from utils.scheduler import Scheduler

logger = logging.getLogger(__name__)


class ManagerBase:
    """Holds the store/scheduler/dispatcher trio every manager needs.

    Async methods run their blocking counterpart on the scheduler's async pool
    and hand the result to ``callback`` through the dispatcher, so with a
    :class:`~utils.app_signals.QtDispatcher` the callback runs on the GUI
    thread.
    """

    def __init__(
        self,
        store: RecordStore,
        scheduler: Scheduler,
        dispatcher: Optional[Dispatcher] = None,
    ) -> None:
        self.store = store
        self.scheduler = scheduler
        self.dispatcher: Dispatcher = dispatcher or DirectDispatcher()

    def _run_async(
        self,
        work: Callable[[], Any],
        callback: Optional[Callable[[Any], None]] = None,
    ) -> Future:
        def task() -> Any:
            result = work()
            if callback is not None:
                self.dispatcher.post(callback, result)
            return result

        return self.scheduler.run_async(task)


__all__ = ["ManagerBase"]
