from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.sentinels import UNSET
from ..core.enums import ShiftStatus


@dataclass(frozen=True)
class Shift:
    """Domain entity: a scheduled shift; `user_id=None` means open/unassigned."""

    shift_id: int
    business_id: int
    start_at: datetime
    end_at: datetime
    user_id: Optional[int] = None
    location_id: Optional[int] = None
    role_tag: Optional[str] = None
    notes: Optional[str] = None
    status: ShiftStatus = ShiftStatus.DRAFT
    published_at: Optional[datetime] = None
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.user_id is None


@dataclass(frozen=True)
class NewShift:
    business_id: int
    start_at: datetime
    end_at: datetime
    created_by: int
    user_id: Optional[int] = None
    location_id: Optional[int] = None
    role_tag: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class ShiftPatch:
    """Partial update of a shift.

    `start_at` / `end_at`: None keeps. The other fields: UNSET keeps, a falsy
    value clears (so `user_id=None` turns the shift into an open shift).
    """

    start_at: Optional[object] = None
    end_at: Optional[object] = None
    user_id: object = UNSET
    location_id: object = UNSET
    role_tag: object = UNSET
    notes: object = UNSET
