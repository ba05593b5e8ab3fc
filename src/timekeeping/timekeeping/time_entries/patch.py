from __future__ import annotations

from dataclasses import replace

from ..common.sentinels import merge_clearable
from .model import TimeEntry, TimeEntryPatch


def apply_patch(entry: TimeEntry, patch: TimeEntryPatch) -> TimeEntry:
    return replace(
        entry,
        work_date=patch.work_date if patch.work_date is not None else entry.work_date,
        start_time=patch.start_time if patch.start_time is not None else entry.start_time,
        end_time=patch.end_time if patch.end_time is not None else entry.end_time,
        break_minutes=patch.break_minutes if patch.break_minutes is not None else entry.break_minutes,
        notes=merge_clearable(patch.notes, entry.notes),
        location_id=merge_clearable(patch.location_id, entry.location_id),
    )
