from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ShiftStatus
from .model import NewShift, Shift


@dataclass(frozen=True)
class ShiftQuery:
    """Filter for `list_shifts`; every query is bound to one business.

    `visible_to_user_id` restricts to that user's shifts, plus open published
    shifts when `include_open` is set. `overlaps` keeps shifts intersecting the
    half-open `(start, end)` window.
    """

    business_id: int
    user_id: Optional[int] = None
    status: Optional[ShiftStatus] = None
    exclude_status: Optional[ShiftStatus] = None
    visible_to_user_id: Optional[int] = None
    include_open: bool = False
    starts_from: Optional[datetime] = None
    starts_to: Optional[datetime] = None
    overlaps: Optional[tuple[datetime, datetime]] = None
    exclude_id: Optional[int] = None


class ShiftRepository(Protocol):
    async def get_by_id(self, shift_id: int) -> Optional[Shift]:
        """Unscoped lookup; the caller checks the business id."""

        raise NotImplementedError

    async def list_shifts(self, query: ShiftQuery) -> Sequence[Shift]:
        """Rows ordered by start_at ascending."""

        raise NotImplementedError

    async def create(self, shift: NewShift) -> Shift:
        raise NotImplementedError

    async def save(self, shift: Shift) -> Shift:
        raise NotImplementedError
