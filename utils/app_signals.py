from __future__ import annotations

import logging
from typing import Any, Callable, Protocol

from PySide6.QtCore import QObject, Qt, Signal, Slot

logger = logging.getLogger(__name__)

Callback = Callable[[Any], None]


class Dispatcher(Protocol):
    def post(self, callback: Callback, result: Any) -> None: ...


class DirectDispatcher:
    """Invoke callbacks on whichever thread produced the result.

    Suitable when no Qt event loop is running (tests, scripts).
    """

    def post(self, callback: Callback, result: Any) -> None:
        callback(result)


class QtDispatcher(QObject):
    """Deliver completion callbacks on the thread that owns this object.

    Create it on the GUI thread.  Worker threads call :meth:`post`; the signal
    is connected with a queued connection so the callback runs from the GUI
    event loop, never from the worker.
    """

    delivered = Signal(object, object)  # callback, result

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self.delivered.connect(self._invoke, Qt.QueuedConnection)

    def post(self, callback: Callback, result: Any) -> None:
        self.delivered.emit(callback, result)

    @Slot(object, object)
    def _invoke(self, callback: Callback, result: Any) -> None:
        try:
            callback(result)
        except Exception:
            logger.exception("Callback %r raised on the GUI thread", callback)


class LogbookSignals(QObject):
    """App-wide notifications so views can stay in sync with the database."""

    # Emitted after an aircraft is added or removed; provides the registration
    aircraftChanged = Signal(str)
    # Emitted after a flight is logged or removed; provides the flight id as text
    flightsChanged = Signal(str)
    # Emitted when the dark mode toggle changes
    darkModeChanged = Signal(bool)


__all__ = ["Dispatcher", "DirectDispatcher", "QtDispatcher", "LogbookSignals"]
