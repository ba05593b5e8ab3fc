"""Overlap predicates over half-open intervals.

Callers load the candidate rows already scoped to one business and user, with
void entries / canceled shifts and the record being edited filtered out.
Touching endpoints do not overlap.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, TypeVar

from ..core.exceptions import TimeMathError
from .time_math import time_to_minutes

T = TypeVar("T")


def intervals_overlap(a_start, a_end, b_start, b_end) -> bool:
    return a_start < b_end and a_end > b_start


def find_time_entry_conflict(start_time: str, end_time: str, existing: Iterable[T]) -> Optional[T]:
    """Return the first entry whose `[start_time, end_time)` intersects the candidate."""
    new_start = time_to_minutes(start_time)
    new_end = time_to_minutes(end_time)

    for entry in existing:
        if not entry.start_time or not entry.end_time:
            continue
        try:
            start = time_to_minutes(entry.start_time)
            end = time_to_minutes(entry.end_time)
        except TimeMathError:
            continue
        if intervals_overlap(start, end, new_start, new_end):
            return entry
    return None


def find_shift_conflict(start_at: datetime, end_at: datetime, existing: Iterable[T]) -> Optional[T]:
    for shift in existing:
        if intervals_overlap(shift.start_at, shift.end_at, start_at, end_at):
            return shift
    return None
