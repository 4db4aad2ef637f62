"""Background task scheduling for the logbook.

The GUI never talks to SQLite directly; it hands blocking work to a
:class:`Scheduler`, which owns two thread pools:

- an async pool for fire-and-forget submissions (``run_async``),
- a fixed-size timer pool that runs delayed and repeating tasks.

A single dispatcher thread keeps a heap of due times and hands due tasks to
the timer pool.  Repeating tasks use fixed-delay semantics: the next run is
scheduled ``interval_ms`` after the previous run finished, so a slow run
pushes the following ones back.

The scheduler is constructed explicitly by the entry point and passed to the
components that need it.  It owns every task handle in a plain registry;
callers keep the handle (or its id) and cancel through it.
"""
from __future__ import annotations

import heapq
import itertools
import logging
import threading
import time
import uuid
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable, Dict, List, Optional, Set, Tuple, Union

logger = logging.getLogger(__name__)

Work = Callable[[], object]


class ScheduledTask:
    """Handle for a one-shot delayed task."""

    repeating = False

    def __init__(self, work: Work, delay_ms: int, *, scheduler: "Scheduler") -> None:
        self.id = uuid.uuid4()
        self.work = work
        self.initial_delay_ms = int(delay_ms)
        self._scheduler = scheduler
        self._cancelled = threading.Event()
        self._runs = 0
        self._lock = threading.Lock()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def run_count(self) -> int:
        with self._lock:
            return self._runs

    def cancel(self) -> None:
        """Suppress future executions.  Safe to call more than once."""
        if self._cancelled.is_set():
            return
        self._cancelled.set()
        self._scheduler._unregister(self)

    def _run(self) -> None:
        if self.cancelled:
            return
        try:
            self.work()
        except Exception:
            logger.exception("Scheduled task %s raised", self.id)
        finally:
            with self._lock:
                self._runs += 1
        self._after_run()

    def _after_run(self) -> None:
        self._scheduler._unregister(self)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id} cancelled={self.cancelled}>"


class RepeatingTask(ScheduledTask):
    """Handle for a fixed-delay repeating task."""

    repeating = True

    def __init__(self, work: Work, initial_delay_ms: int, interval_ms: int, *, scheduler: "Scheduler") -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        super().__init__(work, initial_delay_ms, scheduler=scheduler)
        self.interval_ms = int(interval_ms)

    def _after_run(self) -> None:
        if not self.cancelled:
            self._scheduler._schedule(self, self.interval_ms)


class Scheduler:
    """Owns the worker pools and the registry of delayed/repeating tasks."""

    def __init__(
        self,
        *,
        timer_workers: int = 4,
        max_async_workers: int = 32,
        shutdown_grace: float = 5.0,
    ) -> None:
        logger.info("Initializing thread pools")
        self.shutdown_grace = shutdown_grace
        self._async_pool = ThreadPoolExecutor(max_workers=max_async_workers, thread_name_prefix="logbook-async")
        self._timer_pool = ThreadPoolExecutor(max_workers=timer_workers, thread_name_prefix="logbook-timer")
        self._tasks: Dict[uuid.UUID, ScheduledTask] = {}
        self._in_flight: Set[Future] = set()
        self._heap: List[Tuple[float, int, ScheduledTask]] = []
        self._seq = itertools.count()
        self._cond = threading.Condition()
        self._closed = False
        self._dispatcher = threading.Thread(target=self._dispatch_loop, name="logbook-timers", daemon=True)
        self._dispatcher.start()

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------
    def run_async(self, work: Work) -> Future:
        """Run ``work`` on the async pool and return its future."""
        with self._cond:
            self._ensure_open()
            future = self._async_pool.submit(self._guard, work)
            self._track(future)
        return future

    def run_async_later(self, work: Work, delay_ms: int) -> ScheduledTask:
        task = ScheduledTask(work, delay_ms, scheduler=self)
        self._register_and_schedule(task, task.initial_delay_ms)
        return task

    def run_repeating(self, work: Work, initial_delay_ms: int, interval_ms: int) -> RepeatingTask:
        task = RepeatingTask(work, initial_delay_ms, interval_ms, scheduler=self)
        self._register_and_schedule(task, task.initial_delay_ms)
        return task

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------
    def task(self, task_id: uuid.UUID) -> Optional[ScheduledTask]:
        with self._cond:
            return self._tasks.get(task_id)

    @property
    def tasks(self) -> List[ScheduledTask]:
        with self._cond:
            return list(self._tasks.values())

    def cancel_task(self, task: Union[ScheduledTask, uuid.UUID]) -> None:
        if isinstance(task, ScheduledTask):
            task.cancel()
            return
        found = self.task(task)
        if found is not None:
            found.cancel()

    def cancel_all(self) -> None:
        for task in self.tasks:
            task.cancel()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @property
    def closed(self) -> bool:
        return self._closed

    def shutdown(self, grace: Optional[float] = None) -> None:
        """Stop accepting work, wait for in-flight work, then drop the rest."""

        with self._cond:
            if self._closed:
                return
            self._closed = True
            self._cond.notify_all()
        self.cancel_all()
        grace = self.shutdown_grace if grace is None else grace
        with self._cond:
            pending = set(self._in_flight)
        logger.info("Shutting down scheduler (%d task(s) in flight)", len(pending))
        if pending:
            _, not_done = wait(pending, timeout=grace)
            if not_done:
                logger.warning("%d task(s) still running after %.1fs; abandoning", len(not_done), grace)
        self._async_pool.shutdown(wait=False, cancel_futures=True)
        self._timer_pool.shutdown(wait=False, cancel_futures=True)
        self._dispatcher.join(timeout=1.0)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Scheduler has been shut down")

    def _guard(self, work: Work) -> object:
        try:
            return work()
        except Exception:
            logger.exception("Async task raised")
            raise

    def _track(self, future: Future) -> None:
        self._in_flight.add(future)
        future.add_done_callback(self._untrack)

    def _untrack(self, future: Future) -> None:
        with self._cond:
            self._in_flight.discard(future)

    def _register_and_schedule(self, task: ScheduledTask, delay_ms: int) -> None:
        with self._cond:
            self._ensure_open()
            self._tasks[task.id] = task
        self._schedule(task, delay_ms)

    def _schedule(self, task: ScheduledTask, delay_ms: int) -> None:
        due = time.monotonic() + max(delay_ms, 0) / 1000.0
        with self._cond:
            if self._closed or task.cancelled:
                return
            heapq.heappush(self._heap, (due, next(self._seq), task))
            self._cond.notify_all()

    def _unregister(self, task: ScheduledTask) -> None:
        with self._cond:
            self._tasks.pop(task.id, None)

    def _dispatch_loop(self) -> None:
        while True:
            with self._cond:
                while not self._closed:
                    if not self._heap:
                        self._cond.wait()
                        continue
                    due = self._heap[0][0]
                    remaining = due - time.monotonic()
                    if remaining <= 0:
                        break
                    self._cond.wait(timeout=remaining)
                if self._closed:
                    self._heap.clear()
                    return
                _, _, task = heapq.heappop(self._heap)
                if task.cancelled:
                    continue
                future = self._timer_pool.submit(task._run)
                self._track(future)


__all__ = ["Scheduler", "ScheduledTask", "RepeatingTask"]
