from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

from ..common.sentinels import merge_clearable
from .model import Shift, ShiftPatch


def apply_patch(
    shift: Shift,
    patch: ShiftPatch,
    *,
    start_at: Optional[datetime] = None,
    end_at: Optional[datetime] = None,
) -> Shift:
    """Merge a patch whose timestamps the caller has already parsed."""
    return replace(
        shift,
        start_at=start_at or shift.start_at,
        end_at=end_at or shift.end_at,
        user_id=merge_clearable(patch.user_id, shift.user_id),
        location_id=merge_clearable(patch.location_id, shift.location_id),
        role_tag=merge_clearable(patch.role_tag, shift.role_tag),
        notes=merge_clearable(patch.notes, shift.notes),
    )
