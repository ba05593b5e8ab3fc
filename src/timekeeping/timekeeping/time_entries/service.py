from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence

from ..common.datetime_utils import now_utc
from ..common.overlap import find_time_entry_conflict
from ..common.time_math import ManualTotals, compute_manual_totals
from ..common.validators import (
    optional_id,
    optional_work_date,
    require_id,
    require_max_length,
    require_work_date,
)
from ..core.constants import MAX_NOTES_LENGTH, MAX_REJECTION_REASON_LENGTH, MIN_REJECTION_REASON_LENGTH
from ..core.enums import TimeEntryStatus
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, TimeMathError, ValidationError
from ..core.permissions import Actor, require_manager, require_owner_or_manager, require_same_business
from ..users.model import TimeTrackingSettings
from ..users.repository import MemberRepository, SettingsRepository
from .model import BulkResult, NewTimeEntry, TimeEntry, TimeEntryDetail, TimeEntryPatch, TimeEntrySummary
from .patch import apply_patch
from .repository import TimeEntryQuery, TimeEntryRepository

logger = logging.getLogger(__name__)

SUMMARY_STATUSES = (
    TimeEntryStatus.DRAFT,
    TimeEntryStatus.SUBMITTED,
    TimeEntryStatus.APPROVED,
    TimeEntryStatus.REJECTED,
    TimeEntryStatus.VOID,
)


def _totals(
    start_time: Optional[str],
    end_time: Optional[str],
    break_minutes,
    settings: Optional[TimeTrackingSettings] = None,
) -> ManualTotals:
    """Compute totals, re-raising time math failures as ValidationError."""
    settings = settings or TimeTrackingSettings()
    try:
        return compute_manual_totals(
            start_time,
            end_time,
            break_minutes,
            rounding_minutes=settings.rounding_minutes,
            rounding_mode=settings.rounding_mode,
        )
    except TimeMathError as e:
        raise ValidationError(str(e)) from e


def _parse_status(value) -> Optional[TimeEntryStatus]:
    if value is None or value == "":
        return None
    try:
        return TimeEntryStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown status: {value}")


def _parse_reason(reason) -> str:
    text = str(reason).strip() if reason is not None else ""
    if len(text) < MIN_REJECTION_REASON_LENGTH:
        raise ValidationError("Rejection reason is required")
    require_max_length(text, "Rejection reason", MAX_REJECTION_REASON_LENGTH)
    return text


def _parse_ids(entry_ids) -> list[int]:
    if not isinstance(entry_ids, (list, tuple, set)) or not entry_ids:
        raise ValidationError("entryIds must be a non-empty array")
    return [require_id(i, "entryIds") for i in entry_ids]


class TimeEntryService:
    """Lifecycle of manual time entries.

    draft -> submitted -> approved | rejected; draft/rejected are editable;
    void is terminal. The overlap check and the write are separate round-trips,
    so two concurrent creates for the same interval can both succeed.
    """

    def __init__(self, entries: TimeEntryRepository, members: MemberRepository, settings: SettingsRepository):
        self._entries = entries
        self._members = members
        self._settings = settings

    async def _load_manual(self, business_id: int, entry_id) -> TimeEntry:
        entry = await self._entries.get_by_id(require_id(entry_id, "entryId"))
        if not entry:
            raise NotFoundError("Time entry not found")
        require_same_business(business_id, entry.business_id)
        if not entry.is_manual:
            raise NotFoundError("Manual time entry not found")
        return entry

    async def _ensure_member(self, business_id: int, user_id: int) -> None:
        member = await self._members.get_in_business(int(business_id), int(user_id))
        if not member:
            raise NotFoundError("User not found in this business")
        if not member.is_usable:
            raise AuthorizationError("User is not active")

    async def _ensure_no_overlap(
        self,
        *,
        business_id: int,
        user_id: int,
        work_date: str,
        start_time: str,
        end_time: str,
        exclude_entry_id: Optional[int] = None,
    ) -> None:
        existing = await self._entries.list_entries(
            TimeEntryQuery(
                business_id=int(business_id),
                user_id=int(user_id),
                work_date=work_date,
                exclude_status=TimeEntryStatus.VOID,
                exclude_id=exclude_entry_id,
            )
        )
        try:
            clash = find_time_entry_conflict(start_time, end_time, existing)
        except TimeMathError as e:
            raise ValidationError(str(e)) from e
        if clash is not None:
            logger.warning(
                "Overlap for user %s on %s: %s-%s clashes with entry %s",
                user_id, work_date, start_time, end_time, clash.entry_id,
            )
            raise ConflictError("Time entry overlaps an existing entry on the same date")

    async def create_entry(
        self,
        *,
        business_id: int,
        actor: Actor,
        work_date: str,
        start_time: str,
        end_time: str,
        break_minutes=0,
        target_user_id: Optional[int] = None,
        notes: Optional[str] = None,
        location_id: Optional[int] = None,
    ) -> TimeEntry:
        user_id = optional_id(target_user_id, "targetUserId") or int(actor.user_id)

        if not actor.is_manager_like and not actor.owns(user_id):
            raise AuthorizationError("Employees can only create their own time entries")

        await self._ensure_member(business_id, user_id)

        if not work_date:
            raise ValidationError("workDate is required (YYYY-MM-DD)")
        if not start_time:
            raise ValidationError("startTime is required (HH:mm)")
        if not end_time:
            raise ValidationError("endTime is required (HH:mm)")
        work_date = require_work_date(work_date)
        require_max_length(notes, "notes", MAX_NOTES_LENGTH)

        totals = _totals(start_time, end_time, break_minutes)

        await self._ensure_no_overlap(
            business_id=business_id,
            user_id=user_id,
            work_date=work_date,
            start_time=start_time,
            end_time=end_time,
        )

        entry = await self._entries.create(
            NewTimeEntry(
                business_id=int(business_id),
                user_id=user_id,
                work_date=work_date,
                start_time=start_time,
                end_time=end_time,
                break_minutes=totals.break_minutes,
                created_by=int(actor.user_id),
                notes=notes or None,
                location_id=location_id or None,
            )
        )
        logger.info("Time entry %s created for user %s by %s", entry.entry_id, user_id, actor.user_id)
        return entry

    async def update_entry(self, *, business_id: int, actor: Actor, entry_id, patch: TimeEntryPatch) -> TimeEntry:
        entry = await self._load_manual(business_id, entry_id)
        require_owner_or_manager(actor, entry.user_id, "Employees can only edit their own time entry")

        if not entry.status.is_editable:
            raise ConflictError("Only draft or rejected entries can be edited")

        if patch.work_date is not None:
            require_work_date(patch.work_date)
        if isinstance(patch.notes, str):
            require_max_length(patch.notes, "notes", MAX_NOTES_LENGTH)

        nxt = apply_patch(entry, patch)
        totals = _totals(nxt.start_time, nxt.end_time, nxt.break_minutes)
        # Legacy rows may lack a date; the overlap scan must stay on one day.
        work_date = require_work_date(nxt.work_date)

        await self._ensure_no_overlap(
            business_id=business_id,
            user_id=entry.user_id,
            work_date=work_date,
            start_time=nxt.start_time,
            end_time=nxt.end_time,
            exclude_entry_id=entry.entry_id,
        )

        saved = await self._entries.save(
            replace(nxt, work_date=work_date, break_minutes=totals.break_minutes, updated_by=int(actor.user_id))
        )
        logger.info("Time entry %s updated by %s", entry.entry_id, actor.user_id)
        return saved

    async def submit_entry(self, *, business_id: int, actor: Actor, entry_id) -> TimeEntry:
        entry = await self._load_manual(business_id, entry_id)
        require_owner_or_manager(actor, entry.user_id, "Employees can only submit their own time entry")

        if not entry.status.is_editable:
            raise ConflictError("Only draft or rejected entries can be submitted")

        _totals(entry.start_time, entry.end_time, entry.break_minutes)

        saved = await self._entries.save(
            replace(
                entry,
                status=TimeEntryStatus.SUBMITTED,
                submitted_at=now_utc(),
                updated_by=int(actor.user_id),
            )
        )
        logger.info("Time entry %s submitted by %s", entry.entry_id, actor.user_id)
        return saved

    async def approve_entry(self, *, business_id: int, actor: Actor, entry_id) -> TimeEntry:
        require_manager(actor, "Only managers/owners can approve time entries")

        entry = await self._load_manual(business_id, entry_id)
        if entry.status != TimeEntryStatus.SUBMITTED:
            raise ConflictError("Only submitted time entries can be approved")

        saved = await self._entries.save(
            replace(
                entry,
                status=TimeEntryStatus.APPROVED,
                approved_by=int(actor.user_id),
                approved_at=now_utc(),
                updated_by=int(actor.user_id),
            )
        )
        logger.info("Time entry %s approved by %s", entry.entry_id, actor.user_id)
        return saved

    async def reject_entry(self, *, business_id: int, actor: Actor, entry_id, reason) -> TimeEntry:
        require_manager(actor, "Only managers/owners can reject time entries")
        reason = _parse_reason(reason)

        entry = await self._load_manual(business_id, entry_id)
        if entry.status != TimeEntryStatus.SUBMITTED:
            raise ConflictError("Only submitted time entries can be rejected")

        saved = await self._entries.save(
            replace(
                entry,
                status=TimeEntryStatus.REJECTED,
                rejection_reason=reason,
                updated_by=int(actor.user_id),
            )
        )
        logger.info("Time entry %s rejected by %s", entry.entry_id, actor.user_id)
        return saved

    async def void_entry(self, *, business_id: int, actor: Actor, entry_id) -> TimeEntry:
        entry = await self._load_manual(business_id, entry_id)

        # Managers may void from any state, approved included.
        if not actor.is_manager_like:
            if not actor.owns(entry.user_id):
                raise AuthorizationError("Employees can only void their own time entry")
            if not entry.status.is_editable:
                raise ConflictError("You can only void draft or rejected entries")

        saved = await self._entries.save(
            replace(entry, status=TimeEntryStatus.VOID, updated_by=int(actor.user_id))
        )
        logger.info("Time entry %s voided by %s (was %s)", entry.entry_id, actor.user_id, entry.status.value)
        return saved

    async def _bulk(
        self,
        *,
        business_id: int,
        ids: Sequence[int],
        to_status: TimeEntryStatus,
        changes: dict,
    ) -> BulkResult:
        count = await self._entries.bulk_transition(
            business_id=int(business_id),
            entry_ids=ids,
            from_status=TimeEntryStatus.SUBMITTED,
            to_status=to_status,
            changes=changes,
        )
        updated = await self._entries.list_entries(TimeEntryQuery(business_id=int(business_id), entry_ids=ids))
        return BulkResult(matched=count.matched, modified=count.modified, updated=list(updated))

    async def bulk_approve(self, *, business_id: int, actor: Actor, entry_ids) -> BulkResult:
        require_manager(actor, "Only managers/owners can approve time entries")
        ids = _parse_ids(entry_ids)

        result = await self._bulk(
            business_id=business_id,
            ids=ids,
            to_status=TimeEntryStatus.APPROVED,
            changes={
                "approved_by": int(actor.user_id),
                "approved_at": now_utc(),
                "updated_by": int(actor.user_id),
            },
        )
        logger.info(
            "Bulk approve by %s: %s requested, %s matched, %s modified",
            actor.user_id, len(ids), result.matched, result.modified,
        )
        return result

    async def bulk_reject(self, *, business_id: int, actor: Actor, entry_ids, reason) -> BulkResult:
        require_manager(actor, "Only managers/owners can reject time entries")
        ids = _parse_ids(entry_ids)
        reason = _parse_reason(reason)

        result = await self._bulk(
            business_id=business_id,
            ids=ids,
            to_status=TimeEntryStatus.REJECTED,
            changes={"rejection_reason": reason, "updated_by": int(actor.user_id)},
        )
        logger.info(
            "Bulk reject by %s: %s requested, %s matched, %s modified",
            actor.user_id, len(ids), result.matched, result.modified,
        )
        return result

    async def list_entries(
        self,
        *,
        business_id: int,
        actor: Actor,
        user_id: Optional[int] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        status=None,
        mine: bool = False,
    ) -> Sequence[TimeEntry]:
        requested_user_id = optional_id(user_id, "userId")
        filter_user_id = int(actor.user_id) if mine else requested_user_id

        if not actor.is_manager_like:
            if filter_user_id is not None and not actor.owns(filter_user_id):
                raise AuthorizationError("Employees can only view their own time entries")
            filter_user_id = int(actor.user_id)

        return await self._entries.list_entries(
            TimeEntryQuery(
                business_id=int(business_id),
                user_id=filter_user_id,
                status=_parse_status(status),
                date_from=optional_work_date(date_from, "from"),
                date_to=optional_work_date(date_to, "to"),
            )
        )

    async def get_entry(self, *, business_id: int, actor: Actor, entry_id) -> TimeEntryDetail:
        entry = await self._load_manual(business_id, entry_id)
        require_owner_or_manager(actor, entry.user_id, "Employees can only view their own time entry")

        settings = await self._settings.get_time_tracking(int(business_id))
        try:
            totals = _totals(entry.start_time, entry.end_time, entry.break_minutes, settings)
        except ValidationError as e:
            return TimeEntryDetail(entry=entry, totals=None, totals_error=str(e))
        return TimeEntryDetail(entry=entry, totals=totals)

    async def list_pending(
        self,
        *,
        business_id: int,
        actor: Actor,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> Sequence[TimeEntry]:
        require_manager(actor, "Only managers/owners can view pending approvals")

        return await self._entries.list_entries(
            TimeEntryQuery(
                business_id=int(business_id),
                user_id=optional_id(user_id, "userId"),
                status=TimeEntryStatus.SUBMITTED,
                date_from=optional_work_date(date_from, "from"),
                date_to=optional_work_date(date_to, "to"),
            )
        )

    async def get_summary(
        self,
        *,
        business_id: int,
        actor: Actor,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        mine: bool = False,
        user_id: Optional[int] = None,
    ) -> TimeEntrySummary:
        requested_user_id = optional_id(user_id, "userId")
        target_user_id = int(actor.user_id) if mine else requested_user_id

        if not actor.is_manager_like and (not mine or not actor.owns(target_user_id)):
            raise AuthorizationError("Employees can only view their own time entry summary")

        date_from = optional_work_date(date_from, "from")
        date_to = optional_work_date(date_to, "to")
        entries = await self._entries.list_entries(
            TimeEntryQuery(
                business_id=int(business_id),
                user_id=target_user_id,
                date_from=date_from,
                date_to=date_to,
            )
        )
        settings = await self._settings.get_time_tracking(int(business_id))

        counts = {s.value: 0 for s in SUMMARY_STATUSES}
        paid = paid_rounded = breaks = 0

        for e in entries:
            if e.status.value in counts:
                counts[e.status.value] += 1
            try:
                totals = _totals(e.start_time, e.end_time, e.break_minutes, settings)
            except ValidationError:
                logger.debug("Skipping malformed entry %s in summary", e.entry_id)
                continue
            paid += totals.paid_minutes
            paid_rounded += totals.paid_minutes_rounded
            breaks += totals.break_minutes

        return TimeEntrySummary(
            date_from=date_from,
            date_to=date_to,
            counts=counts,
            total_paid_minutes=paid,
            total_paid_minutes_rounded=paid_rounded,
            total_break_minutes=breaks,
        )
