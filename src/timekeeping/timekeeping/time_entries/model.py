from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..common.sentinels import UNSET
from ..common.time_math import ManualTotals
from ..core.enums import EntryType, TimeEntryStatus


@dataclass(frozen=True)
class TimeEntry:
    """Domain entity: one manual time entry (work date + `HH:mm` interval)."""

    entry_id: int
    business_id: int
    user_id: int
    work_date: Optional[str]
    start_time: Optional[str]
    end_time: Optional[str]
    break_minutes: int = 0
    status: TimeEntryStatus = TimeEntryStatus.DRAFT
    entry_type: EntryType = EntryType.MANUAL
    location_id: Optional[int] = None
    notes: Optional[str] = None
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    submitted_at: Optional[datetime] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_manual(self) -> bool:
        return self.entry_type == EntryType.MANUAL


@dataclass(frozen=True)
class NewTimeEntry:
    """Values for an insert; the repository assigns id and timestamps."""

    business_id: int
    user_id: int
    work_date: str
    start_time: str
    end_time: str
    break_minutes: int
    created_by: int
    notes: Optional[str] = None
    location_id: Optional[int] = None


@dataclass(frozen=True)
class TimeEntryPatch:
    """Partial update of a time entry.

    `None` keeps the temporal fields; `notes` / `location_id` use UNSET to keep,
    any falsy value to clear.
    """

    work_date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    break_minutes: Optional[int] = None
    notes: object = UNSET
    location_id: object = UNSET


@dataclass(frozen=True)
class TimeEntryDetail:
    entry: TimeEntry
    totals: Optional[ManualTotals] = None
    totals_error: Optional[str] = None


@dataclass(frozen=True)
class BulkResult:
    matched: int
    modified: int
    updated: list[TimeEntry] = field(default_factory=list)


@dataclass(frozen=True)
class TimeEntrySummary:
    date_from: Optional[str]
    date_to: Optional[str]
    counts: dict[str, int]
    total_paid_minutes: int
    total_paid_minutes_rounded: int
    total_break_minutes: int
