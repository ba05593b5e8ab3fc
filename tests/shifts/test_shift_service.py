from __future__ import annotations

from datetime import datetime, timezone

import pytest

from tests.fakes import (
    BUSINESS_ID,
    EMPLOYEE_ID,
    MANAGER_ID,
    OTHER_BUSINESS_ID,
    OTHER_EMPLOYEE_ID,
    InMemoryShifts,
)
from timekeeping.core.enums import Role, ShiftStatus
from timekeeping.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from timekeeping.core.permissions import Actor
from timekeeping.shifts.model import ShiftPatch
from timekeeping.shifts.service import ShiftService

EMPLOYEE = Actor(EMPLOYEE_ID, Role.EMPLOYEE)
MANAGER = Actor(MANAGER_ID, Role.MANAGER)


def _at(day: int, hour: int) -> datetime:
    return datetime(2024, 1, day, hour, 0, tzinfo=timezone.utc)


@pytest.fixture
def repo():
    return InMemoryShifts()


@pytest.fixture
def svc(repo):
    return ShiftService(repo)


async def _create(svc, **overrides):
    params = dict(
        business_id=BUSINESS_ID,
        actor=MANAGER,
        start_at="2024-01-05T09:00:00Z",
        end_at="2024-01-05T17:00:00Z",
    )
    params.update(overrides)
    return await svc.create_shift(**params)


async def test_create_shift_parses_iso_timestamps(svc):
    shift = await _create(svc, user_id=EMPLOYEE_ID, role_tag="barista")
    assert shift.status == ShiftStatus.DRAFT
    assert shift.start_at == _at(5, 9)
    assert shift.end_at == _at(5, 17)
    assert shift.user_id == EMPLOYEE_ID
    assert shift.created_by == MANAGER_ID


async def test_naive_timestamps_are_read_as_utc(svc):
    shift = await _create(svc, start_at="2024-01-05T09:00:00", end_at=datetime(2024, 1, 5, 17, 0))
    assert shift.start_at == _at(5, 9)
    assert shift.end_at == _at(5, 17)


@pytest.mark.parametrize(
    "overrides",
    [
        {"start_at": "tomorrow"},
        {"end_at": ""},
        {"end_at": "2024-01-05T09:00:00Z"},
        {"end_at": "2024-01-05T08:00:00Z"},
        {"role_tag": "x" * 81},
    ],
)
async def test_create_shift_validation(svc, overrides):
    with pytest.raises(ValidationError):
        await _create(svc, **overrides)


async def test_only_managers_mutate_shifts(svc):
    with pytest.raises(AuthorizationError):
        await _create(svc, actor=EMPLOYEE)
    shift = await _create(svc)
    with pytest.raises(AuthorizationError):
        await svc.publish_shift(business_id=BUSINESS_ID, actor=EMPLOYEE, shift_id=shift.shift_id)
    with pytest.raises(AuthorizationError):
        await svc.assign_shift(business_id=BUSINESS_ID, actor=EMPLOYEE, shift_id=shift.shift_id, user_id=EMPLOYEE_ID)


async def test_open_shifts_skip_overlap_check(svc):
    await _create(svc)
    await _create(svc)
    await _create(svc, user_id=EMPLOYEE_ID)


async def test_overlapping_assigned_shift_is_conflict(svc):
    await _create(svc, user_id=EMPLOYEE_ID)
    with pytest.raises(ConflictError, match="overlaps"):
        await _create(svc, user_id=EMPLOYEE_ID, start_at="2024-01-05T16:00:00Z", end_at="2024-01-05T20:00:00Z")
    # Back-to-back is fine.
    await _create(svc, user_id=EMPLOYEE_ID, start_at="2024-01-05T17:00:00Z", end_at="2024-01-05T20:00:00Z")
    # So is a different employee.
    await _create(svc, user_id=OTHER_EMPLOYEE_ID)


async def test_canceled_shifts_do_not_block(svc):
    first = await _create(svc, user_id=EMPLOYEE_ID)
    await svc.cancel_shift(business_id=BUSINESS_ID, actor=MANAGER, shift_id=first.shift_id)
    await _create(svc, user_id=EMPLOYEE_ID)


async def test_assign_into_overlap_is_conflict(svc):
    await _create(svc, user_id=EMPLOYEE_ID)
    open_shift = await _create(svc, start_at="2024-01-05T12:00:00Z", end_at="2024-01-05T18:00:00Z")

    with pytest.raises(ConflictError):
        await svc.assign_shift(
            business_id=BUSINESS_ID, actor=MANAGER, shift_id=open_shift.shift_id, user_id=EMPLOYEE_ID
        )

    assigned = await svc.assign_shift(
        business_id=BUSINESS_ID, actor=MANAGER, shift_id=open_shift.shift_id, user_id=OTHER_EMPLOYEE_ID
    )
    assert assigned.user_id == OTHER_EMPLOYEE_ID

    unassigned = await svc.unassign_shift(business_id=BUSINESS_ID, actor=MANAGER, shift_id=open_shift.shift_id)
    assert unassigned.user_id is None
    assert unassigned.is_open


async def test_assign_requires_user_id(svc):
    shift = await _create(svc)
    with pytest.raises(ValidationError, match="userId is required"):
        await svc.assign_shift(business_id=BUSINESS_ID, actor=MANAGER, shift_id=shift.shift_id, user_id=None)


async def test_update_shift_moves_and_clears_fields(svc):
    shift = await _create(svc, user_id=EMPLOYEE_ID, notes="bring keys", role_tag="lead")

    moved = await svc.update_shift(
        business_id=BUSINESS_ID,
        actor=MANAGER,
        shift_id=shift.shift_id,
        patch=ShiftPatch(start_at="2024-01-05T10:00:00Z", notes=""),
    )
    assert moved.start_at == _at(5, 10)
    assert moved.end_at == _at(5, 17)
    assert moved.notes is None
    assert moved.role_tag == "lead"
    assert moved.user_id == EMPLOYEE_ID

    opened = await svc.update_shift(
        business_id=BUSINESS_ID, actor=MANAGER, shift_id=shift.shift_id, patch=ShiftPatch(user_id=None)
    )
    assert opened.user_id is None

    with pytest.raises(ValidationError, match="endAt must be after startAt"):
        await svc.update_shift(
            business_id=BUSINESS_ID,
            actor=MANAGER,
            shift_id=shift.shift_id,
            patch=ShiftPatch(end_at="2024-01-05T08:00:00Z"),
        )


async def test_update_into_overlap_is_conflict(svc):
    await _create(svc, user_id=EMPLOYEE_ID)
    later = await _create(svc, user_id=EMPLOYEE_ID, start_at="2024-01-05T18:00:00Z", end_at="2024-01-05T22:00:00Z")
    with pytest.raises(ConflictError):
        await svc.update_shift(
            business_id=BUSINESS_ID,
            actor=MANAGER,
            shift_id=later.shift_id,
            patch=ShiftPatch(start_at="2024-01-05T16:00:00Z"),
        )


async def test_publish_and_cancel_lifecycle(svc):
    shift = await _create(svc)
    published = await svc.publish_shift(business_id=BUSINESS_ID, actor=MANAGER, shift_id=shift.shift_id)
    assert published.status == ShiftStatus.PUBLISHED
    assert published.published_at is not None

    canceled = await svc.cancel_shift(business_id=BUSINESS_ID, actor=MANAGER, shift_id=shift.shift_id)
    assert canceled.status == ShiftStatus.CANCELED

    again = await svc.cancel_shift(business_id=BUSINESS_ID, actor=MANAGER, shift_id=shift.shift_id)
    assert again == canceled

    with pytest.raises(ConflictError):
        await svc.publish_shift(business_id=BUSINESS_ID, actor=MANAGER, shift_id=shift.shift_id)
    with pytest.raises(ConflictError):
        await svc.update_shift(
            business_id=BUSINESS_ID, actor=MANAGER, shift_id=shift.shift_id, patch=ShiftPatch(notes="x")
        )
    with pytest.raises(ConflictError):
        await svc.assign_shift(business_id=BUSINESS_ID, actor=MANAGER, shift_id=shift.shift_id, user_id=EMPLOYEE_ID)
    with pytest.raises(ConflictError):
        await svc.unassign_shift(business_id=BUSINESS_ID, actor=MANAGER, shift_id=shift.shift_id)


async def test_shift_scoping(svc, repo):
    foreign = repo.add(business_id=OTHER_BUSINESS_ID, start_at=_at(5, 9), end_at=_at(5, 17))
    with pytest.raises(AuthorizationError, match="Cross-tenant"):
        await svc.get_shift(business_id=BUSINESS_ID, actor=MANAGER, shift_id=foreign.shift_id)
    with pytest.raises(NotFoundError):
        await svc.get_shift(business_id=BUSINESS_ID, actor=MANAGER, shift_id=404)


async def test_employee_visibility(svc, repo):
    mine = repo.add(user_id=EMPLOYEE_ID, start_at=_at(5, 9), end_at=_at(5, 17), status=ShiftStatus.PUBLISHED)
    open_published = repo.add(start_at=_at(6, 9), end_at=_at(6, 17), status=ShiftStatus.PUBLISHED)
    open_draft = repo.add(start_at=_at(7, 9), end_at=_at(7, 17))
    theirs = repo.add(user_id=OTHER_EMPLOYEE_ID, start_at=_at(8, 9), end_at=_at(8, 17))

    rows = await svc.list_shifts(business_id=BUSINESS_ID, actor=EMPLOYEE)
    assert [s.shift_id for s in rows] == [mine.shift_id, open_published.shift_id]

    rows = await svc.list_shifts(business_id=BUSINESS_ID, actor=EMPLOYEE, include_open=False)
    assert [s.shift_id for s in rows] == [mine.shift_id]

    assert await svc.get_shift(business_id=BUSINESS_ID, actor=EMPLOYEE, shift_id=open_published.shift_id)
    for hidden in (open_draft, theirs):
        with pytest.raises(AuthorizationError, match="only view your own"):
            await svc.get_shift(business_id=BUSINESS_ID, actor=EMPLOYEE, shift_id=hidden.shift_id)


async def test_manager_list_filters(svc, repo):
    repo.add(user_id=EMPLOYEE_ID, start_at=_at(5, 9), end_at=_at(5, 17), status=ShiftStatus.PUBLISHED)
    repo.add(start_at=_at(6, 9), end_at=_at(6, 17))
    repo.add(user_id=MANAGER_ID, start_at=_at(7, 9), end_at=_at(7, 17))

    rows = await svc.list_shifts(business_id=BUSINESS_ID, actor=MANAGER)
    assert len(rows) == 3
    assert [s.start_at for s in rows] == sorted(s.start_at for s in rows)

    rows = await svc.list_shifts(business_id=BUSINESS_ID, actor=MANAGER, mine=True)
    assert [s.user_id for s in rows] == [MANAGER_ID]

    rows = await svc.list_shifts(business_id=BUSINESS_ID, actor=MANAGER, status="draft", date_from="2024-01-06T00:00:00Z")
    assert len(rows) == 2

    with pytest.raises(ValidationError):
        await svc.list_shifts(business_id=BUSINESS_ID, actor=MANAGER, status="archived")


@pytest.mark.parametrize("bad_id", ["abc", -1])
async def test_malformed_user_ids_are_validation_errors(svc, bad_id):
    with pytest.raises(ValidationError, match="userId is invalid"):
        await _create(svc, user_id=bad_id)
    with pytest.raises(ValidationError, match="userId is invalid"):
        await svc.list_shifts(business_id=BUSINESS_ID, actor=MANAGER, user_id=bad_id)
