from __future__ import annotations

import threading
import time

import pytest

from utils.scheduler import RepeatingTask, Scheduler


@pytest.fixture()
def real_scheduler():
    sched = Scheduler(timer_workers=2, max_async_workers=4, shutdown_grace=2.0)
    yield sched
    sched.shutdown()


def _wait_until(predicate, timeout: float = 3.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def test_run_async_returns_future_with_result(real_scheduler: Scheduler) -> None:
    future = real_scheduler.run_async(lambda: 21 * 2)
    assert future.result(timeout=2) == 42


def test_run_async_propagates_exception_to_future(real_scheduler: Scheduler) -> None:
    def boom():
        raise ValueError("nope")

    future = real_scheduler.run_async(boom)
    with pytest.raises(ValueError):
        future.result(timeout=2)


def test_delayed_task_runs_once_and_leaves_registry(real_scheduler: Scheduler) -> None:
    ran = threading.Event()
    task = real_scheduler.run_async_later(ran.set, 20)
    assert real_scheduler.task(task.id) is task
    assert ran.wait(2)
    assert _wait_until(lambda: real_scheduler.task(task.id) is None)
    assert task.run_count == 1


def test_cancelled_delayed_task_never_runs(real_scheduler: Scheduler) -> None:
    ran = threading.Event()
    task = real_scheduler.run_async_later(ran.set, 200)
    real_scheduler.cancel_task(task.id)
    assert task.cancelled
    assert not ran.wait(0.4)
    assert real_scheduler.task(task.id) is None


def test_repeating_task_repeats_until_cancelled(real_scheduler: Scheduler) -> None:
    counter = {"n": 0}

    def tick():
        counter["n"] += 1

    task = real_scheduler.run_repeating(tick, 0, 10)
    assert isinstance(task, RepeatingTask)
    assert _wait_until(lambda: counter["n"] >= 3)
    task.cancel()
    task.cancel()
    settled = counter["n"]
    time.sleep(0.1)
    # at most one run already handed to the pool may still finish
    assert counter["n"] <= settled + 1
    assert real_scheduler.task(task.id) is None


def test_repeating_task_waits_interval_after_slow_run(real_scheduler: Scheduler) -> None:
    starts = []

    def slow():
        starts.append(time.monotonic())
        time.sleep(0.15)

    task = real_scheduler.run_repeating(slow, 0, 50)
    assert _wait_until(lambda: len(starts) >= 3)
    task.cancel()
    # fixed delay: each start follows the previous run's end by the interval
    gaps = [b - a for a, b in zip(starts, starts[1:3])]
    assert all(gap >= 0.15 + 0.05 - 0.01 for gap in gaps)


def test_failing_repeating_task_keeps_repeating(real_scheduler: Scheduler) -> None:
    calls = {"n": 0}

    def flaky():
        calls["n"] += 1
        raise RuntimeError("always fails")

    task = real_scheduler.run_repeating(flaky, 0, 10)
    assert _wait_until(lambda: calls["n"] >= 3)
    task.cancel()


def test_repeating_interval_must_be_positive(real_scheduler: Scheduler) -> None:
    with pytest.raises(ValueError):
        real_scheduler.run_repeating(lambda: None, 0, 0)


def test_cancel_all_clears_registry(real_scheduler: Scheduler) -> None:
    real_scheduler.run_repeating(lambda: None, 1000, 1000)
    real_scheduler.run_async_later(lambda: None, 1000)
    assert len(real_scheduler.tasks) == 2
    real_scheduler.cancel_all()
    assert real_scheduler.tasks == []


def test_shutdown_waits_for_in_flight_work_and_refuses_new_work() -> None:
    sched = Scheduler(shutdown_grace=2.0)
    finished = threading.Event()

    def slow():
        time.sleep(0.1)
        finished.set()

    sched.run_async(slow)
    sched.shutdown()
    assert finished.is_set()
    assert sched.closed
    with pytest.raises(RuntimeError):
        sched.run_async(lambda: None)
    with pytest.raises(RuntimeError):
        sched.run_repeating(lambda: None, 0, 10)
    sched.shutdown()
