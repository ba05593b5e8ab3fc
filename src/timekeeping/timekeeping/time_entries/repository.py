from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import EntryType, TimeEntryStatus
from .model import NewTimeEntry, TimeEntry


@dataclass(frozen=True)
class TimeEntryQuery:
    """Filter for `list_entries`; every query is bound to one business."""

    business_id: int
    entry_type: Optional[EntryType] = EntryType.MANUAL
    user_id: Optional[int] = None
    status: Optional[TimeEntryStatus] = None
    exclude_status: Optional[TimeEntryStatus] = None
    work_date: Optional[str] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    entry_ids: Optional[Sequence[int]] = None
    exclude_id: Optional[int] = None


@dataclass(frozen=True)
class BulkUpdateCount:
    matched: int
    modified: int


class TimeEntryRepository(Protocol):
    """Persistence port for time entries.

    Note (DIP): services depend on this protocol, never on a concrete driver.
    """

    async def get_by_id(self, entry_id: int) -> Optional[TimeEntry]:
        """Unscoped lookup; the caller checks the business id."""

        raise NotImplementedError

    async def list_entries(self, query: TimeEntryQuery) -> Sequence[TimeEntry]:
        """Rows ordered by work_date desc, start_time desc."""

        raise NotImplementedError

    async def create(self, entry: NewTimeEntry) -> TimeEntry:
        raise NotImplementedError

    async def save(self, entry: TimeEntry) -> TimeEntry:
        raise NotImplementedError

    async def bulk_transition(
        self,
        *,
        business_id: int,
        entry_ids: Sequence[int],
        from_status: TimeEntryStatus,
        to_status: TimeEntryStatus,
        changes: Mapping[str, Any],
    ) -> BulkUpdateCount:
        """Single conditional update over manual rows in `from_status`."""

        raise NotImplementedError
