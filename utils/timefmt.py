"""Utility helpers for rendering flight times in the UI."""
from __future__ import annotations

from datetime import timedelta
from typing import Iterable, Optional


def sum_durations(durations: Iterable[timedelta]) -> timedelta:
    """Add up ``durations``; an empty iterable gives ``timedelta(0)``."""

    return sum(durations, timedelta(0))


def format_duration(value: Optional[timedelta], default: str = "--:--:--") -> str:
    """Format ``value`` as ``HH:MM:SS``.

    Hours are not wrapped at a day, so 26 hours renders as ``26:00:00``.
    Negative durations keep a leading ``-``.
    """

    if value is None:
        return default
    total = int(value.total_seconds())
    sign = "-" if total < 0 else ""
    total = abs(total)
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}"


__all__ = ["sum_durations", "format_duration"]
