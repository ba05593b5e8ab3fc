from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from timekeeping.common.overlap import find_shift_conflict, find_time_entry_conflict, intervals_overlap
from timekeeping.core.exceptions import InvalidTimeFormat


def _entry(entry_id, start, end):
    return SimpleNamespace(entry_id=entry_id, start_time=start, end_time=end)


def test_intervals_overlap_is_half_open():
    assert intervals_overlap(0, 10, 5, 15)
    assert intervals_overlap(0, 10, 2, 3)
    assert not intervals_overlap(0, 10, 10, 20)
    assert not intervals_overlap(10, 20, 0, 10)


def test_find_time_entry_conflict_returns_first_clash():
    existing = [_entry(1, "06:00", "08:00"), _entry(2, "12:00", "14:00"), _entry(3, "13:00", "15:00")]
    clash = find_time_entry_conflict("13:30", "16:00", existing)
    assert clash.entry_id == 2


def test_touching_entries_do_not_conflict():
    existing = [_entry(1, "09:00", "12:00")]
    assert find_time_entry_conflict("12:00", "13:00", existing) is None
    assert find_time_entry_conflict("08:00", "09:00", existing) is None


def test_rows_with_missing_or_bad_times_are_ignored():
    existing = [_entry(1, None, "12:00"), _entry(2, "9:00", "12:00"), _entry(3, "", "")]
    assert find_time_entry_conflict("10:00", "11:00", existing) is None


def test_candidate_must_be_well_formed():
    with pytest.raises(InvalidTimeFormat):
        find_time_entry_conflict("25:00", "26:00", [])


def test_find_shift_conflict():
    base = datetime(2024, 1, 5, 9, 0, tzinfo=timezone.utc)
    existing = [SimpleNamespace(shift_id=7, start_at=base, end_at=base + timedelta(hours=8))]

    assert find_shift_conflict(base + timedelta(hours=7), base + timedelta(hours=9), existing).shift_id == 7
    assert find_shift_conflict(base + timedelta(hours=8), base + timedelta(hours=10), existing) is None
