from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_utc, parse_timestamp
from ..common.overlap import find_shift_conflict
from ..common.sentinels import UNSET
from ..common.validators import optional_id, require_id, require_max_length
from ..core.constants import MAX_NOTES_LENGTH, MAX_ROLE_TAG_LENGTH
from ..core.enums import ShiftStatus
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..core.permissions import Actor, require_manager, require_same_business
from .model import NewShift, Shift, ShiftPatch
from .patch import apply_patch
from .repository import ShiftQuery, ShiftRepository

logger = logging.getLogger(__name__)


def _parse_status(value) -> Optional[ShiftStatus]:
    if value is None or value == "":
        return None
    try:
        return ShiftStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown status: {value}")


def _optional_timestamp(value, field_name: str) -> Optional[datetime]:
    if value is None or value == "":
        return None
    return parse_timestamp(value, field_name)


def _check_text(role_tag, notes) -> None:
    if isinstance(role_tag, str):
        require_max_length(role_tag, "roleTag", MAX_ROLE_TAG_LENGTH)
    if isinstance(notes, str):
        require_max_length(notes, "notes", MAX_NOTES_LENGTH)


class ShiftService:
    """Lifecycle of scheduled shifts.

    draft -> published -> canceled, or draft -> canceled. Assignment is not a
    state transition, but canceled shifts reject every mutation.
    """

    def __init__(self, shifts: ShiftRepository):
        self._shifts = shifts

    async def _load(self, business_id: int, shift_id) -> Shift:
        shift = await self._shifts.get_by_id(require_id(shift_id, "shiftId"))
        if not shift:
            raise NotFoundError("Shift not found")
        require_same_business(business_id, shift.business_id)
        return shift

    async def _ensure_no_overlap(
        self,
        *,
        business_id: int,
        user_id: Optional[int],
        start_at: datetime,
        end_at: datetime,
        exclude_shift_id: Optional[int] = None,
    ) -> None:
        # Open shifts never conflict.
        if not user_id:
            return

        existing = await self._shifts.list_shifts(
            ShiftQuery(
                business_id=int(business_id),
                user_id=int(user_id),
                exclude_status=ShiftStatus.CANCELED,
                overlaps=(start_at, end_at),
                exclude_id=exclude_shift_id,
            )
        )
        clash = find_shift_conflict(start_at, end_at, existing)
        if clash is not None:
            logger.warning(
                "Shift overlap for user %s: %s-%s clashes with shift %s",
                user_id, start_at.isoformat(), end_at.isoformat(), clash.shift_id,
            )
            raise ConflictError("Shift overlaps an existing shift for this user")

    async def create_shift(
        self,
        *,
        business_id: int,
        actor: Actor,
        start_at,
        end_at,
        user_id: Optional[int] = None,
        location_id: Optional[int] = None,
        role_tag: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Shift:
        require_manager(actor, "Only managers/owners can create shifts")

        start = parse_timestamp(start_at, "startAt")
        end = parse_timestamp(end_at, "endAt")
        if end <= start:
            raise ValidationError("endAt must be after startAt")
        _check_text(role_tag, notes)

        user_id = optional_id(user_id, "userId")
        await self._ensure_no_overlap(business_id=business_id, user_id=user_id, start_at=start, end_at=end)

        shift = await self._shifts.create(
            NewShift(
                business_id=int(business_id),
                start_at=start,
                end_at=end,
                created_by=int(actor.user_id),
                user_id=user_id,
                location_id=location_id or None,
                role_tag=role_tag or None,
                notes=notes or None,
            )
        )
        logger.info("Shift %s created by %s (user=%s)", shift.shift_id, actor.user_id, user_id)
        return shift

    async def update_shift(self, *, business_id: int, actor: Actor, shift_id, patch: ShiftPatch) -> Shift:
        require_manager(actor, "Only managers/owners can update shifts")

        shift = await self._load(business_id, shift_id)
        if shift.status == ShiftStatus.CANCELED:
            raise ConflictError("Canceled shifts cannot be edited")

        _check_text(patch.role_tag, patch.notes)
        user_id = patch.user_id
        if user_id is not UNSET and user_id:
            user_id = require_id(user_id, "userId")

        nxt = apply_patch(
            shift,
            replace(patch, user_id=user_id),
            start_at=_optional_timestamp(patch.start_at, "startAt"),
            end_at=_optional_timestamp(patch.end_at, "endAt"),
        )
        if nxt.end_at <= nxt.start_at:
            raise ValidationError("endAt must be after startAt")

        await self._ensure_no_overlap(
            business_id=business_id,
            user_id=nxt.user_id,
            start_at=nxt.start_at,
            end_at=nxt.end_at,
            exclude_shift_id=shift.shift_id,
        )

        saved = await self._shifts.save(replace(nxt, updated_by=int(actor.user_id)))
        logger.info("Shift %s updated by %s", shift.shift_id, actor.user_id)
        return saved

    async def publish_shift(self, *, business_id: int, actor: Actor, shift_id) -> Shift:
        require_manager(actor, "Only managers/owners can publish shifts")

        shift = await self._load(business_id, shift_id)
        if shift.status == ShiftStatus.CANCELED:
            raise ConflictError("Canceled shifts cannot be published")

        saved = await self._shifts.save(
            replace(
                shift,
                status=ShiftStatus.PUBLISHED,
                published_at=now_utc(),
                updated_by=int(actor.user_id),
            )
        )
        logger.info("Shift %s published by %s", shift.shift_id, actor.user_id)
        return saved

    async def cancel_shift(self, *, business_id: int, actor: Actor, shift_id) -> Shift:
        require_manager(actor, "Only managers/owners can cancel shifts")

        shift = await self._load(business_id, shift_id)
        if shift.status == ShiftStatus.CANCELED:
            return shift

        saved = await self._shifts.save(
            replace(shift, status=ShiftStatus.CANCELED, updated_by=int(actor.user_id))
        )
        logger.info("Shift %s canceled by %s", shift.shift_id, actor.user_id)
        return saved

    async def assign_shift(self, *, business_id: int, actor: Actor, shift_id, user_id) -> Shift:
        require_manager(actor, "Only managers/owners can assign shifts")
        if not user_id:
            raise ValidationError("userId is required")
        user_id = require_id(user_id, "userId")

        shift = await self._load(business_id, shift_id)
        if shift.status == ShiftStatus.CANCELED:
            raise ConflictError("Canceled shifts cannot be assigned")

        await self._ensure_no_overlap(
            business_id=business_id,
            user_id=user_id,
            start_at=shift.start_at,
            end_at=shift.end_at,
            exclude_shift_id=shift.shift_id,
        )

        saved = await self._shifts.save(replace(shift, user_id=user_id, updated_by=int(actor.user_id)))
        logger.info("Shift %s assigned to %s by %s", shift.shift_id, user_id, actor.user_id)
        return saved

    async def unassign_shift(self, *, business_id: int, actor: Actor, shift_id) -> Shift:
        require_manager(actor, "Only managers/owners can unassign shifts")

        shift = await self._load(business_id, shift_id)
        if shift.status == ShiftStatus.CANCELED:
            raise ConflictError("Canceled shifts cannot be unassigned")

        saved = await self._shifts.save(replace(shift, user_id=None, updated_by=int(actor.user_id)))
        logger.info("Shift %s unassigned by %s", shift.shift_id, actor.user_id)
        return saved

    async def get_shift(self, *, business_id: int, actor: Actor, shift_id) -> Shift:
        shift = await self._load(business_id, shift_id)

        if not actor.is_manager_like:
            is_mine = actor.owns(shift.user_id)
            is_open_published = shift.is_open and shift.status == ShiftStatus.PUBLISHED
            if not is_mine and not is_open_published:
                raise AuthorizationError("You can only view your own shifts")

        return shift

    async def list_shifts(
        self,
        *,
        business_id: int,
        actor: Actor,
        date_from=None,
        date_to=None,
        user_id: Optional[int] = None,
        status=None,
        mine: bool = False,
        include_open: bool = True,
    ) -> Sequence[Shift]:
        starts_from = _optional_timestamp(date_from, "from")
        starts_to = _optional_timestamp(date_to, "to")

        if not actor.is_manager_like:
            query = ShiftQuery(
                business_id=int(business_id),
                visible_to_user_id=int(actor.user_id),
                include_open=bool(include_open),
                starts_from=starts_from,
                starts_to=starts_to,
            )
        else:
            requested_user_id = optional_id(user_id, "userId")
            filter_user = int(actor.user_id) if mine else requested_user_id
            query = ShiftQuery(
                business_id=int(business_id),
                user_id=filter_user,
                status=_parse_status(status),
                starts_from=starts_from,
                starts_to=starts_to,
            )

        return await self._shifts.list_shifts(query)
