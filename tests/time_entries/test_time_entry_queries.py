from __future__ import annotations

import pytest

from tests.fakes import (
    BUSINESS_ID,
    EMPLOYEE_ID,
    MANAGER_ID,
    OTHER_BUSINESS_ID,
    OTHER_EMPLOYEE_ID,
    InMemoryMembers,
    InMemorySettings,
    InMemoryTimeEntries,
)
from timekeeping.core.enums import EntryType, Role, RoundingMode, TimeEntryStatus
from timekeeping.core.exceptions import AuthorizationError, ValidationError
from timekeeping.core.permissions import Actor
from timekeeping.time_entries.service import TimeEntryService
from timekeeping.users.model import TimeTrackingSettings

EMPLOYEE = Actor(EMPLOYEE_ID, Role.EMPLOYEE)
MANAGER = Actor(MANAGER_ID, Role.MANAGER)


@pytest.fixture
def repo():
    r = InMemoryTimeEntries()
    r.add(work_date="2024-01-03", status=TimeEntryStatus.APPROVED)
    r.add(work_date="2024-01-04", status=TimeEntryStatus.SUBMITTED)
    r.add(work_date="2024-01-05", status=TimeEntryStatus.DRAFT, break_minutes=30)
    r.add(work_date="2024-01-05", user_id=OTHER_EMPLOYEE_ID, status=TimeEntryStatus.SUBMITTED)
    r.add(work_date="2024-01-05", user_id=OTHER_EMPLOYEE_ID, start_time="18:00", end_time="20:00",
          status=TimeEntryStatus.VOID)
    r.add(work_date="2024-01-05", business_id=OTHER_BUSINESS_ID, status=TimeEntryStatus.SUBMITTED)
    r.add(work_date="2024-01-05", entry_type=EntryType.CLOCK, status=TimeEntryStatus.OPEN)
    return r


@pytest.fixture
def svc(repo):
    return TimeEntryService(repo, InMemoryMembers(), InMemorySettings())


# -- list -----------------------------------------------------------------


async def test_manager_lists_business_manual_entries_newest_first(svc):
    rows = await svc.list_entries(business_id=BUSINESS_ID, actor=MANAGER)
    assert len(rows) == 5
    assert all(r.business_id == BUSINESS_ID and r.entry_type == EntryType.MANUAL for r in rows)
    assert [r.work_date for r in rows] == sorted((r.work_date for r in rows), reverse=True)


async def test_manager_filters(svc):
    rows = await svc.list_entries(
        business_id=BUSINESS_ID, actor=MANAGER, user_id=EMPLOYEE_ID, date_from="2024-01-04", date_to="2024-01-05"
    )
    assert {r.work_date for r in rows} == {"2024-01-04", "2024-01-05"}
    assert {r.user_id for r in rows} == {EMPLOYEE_ID}

    submitted = await svc.list_entries(business_id=BUSINESS_ID, actor=MANAGER, status="submitted")
    assert {r.status for r in submitted} == {TimeEntryStatus.SUBMITTED}


async def test_employee_list_is_narrowed_to_own_rows(svc):
    rows = await svc.list_entries(business_id=BUSINESS_ID, actor=EMPLOYEE)
    assert len(rows) == 3
    assert {r.user_id for r in rows} == {EMPLOYEE_ID}

    with pytest.raises(AuthorizationError):
        await svc.list_entries(business_id=BUSINESS_ID, actor=EMPLOYEE, user_id=OTHER_EMPLOYEE_ID)


async def test_list_validates_filters(svc):
    with pytest.raises(ValidationError):
        await svc.list_entries(business_id=BUSINESS_ID, actor=MANAGER, status="pending")
    with pytest.raises(ValidationError):
        await svc.list_entries(business_id=BUSINESS_ID, actor=MANAGER, date_from="Jan 1")


async def test_pending_is_manager_only(svc):
    pending = await svc.list_pending(business_id=BUSINESS_ID, actor=MANAGER)
    assert {(r.user_id, r.work_date) for r in pending} == {
        (EMPLOYEE_ID, "2024-01-04"),
        (OTHER_EMPLOYEE_ID, "2024-01-05"),
    }
    with pytest.raises(AuthorizationError):
        await svc.list_pending(business_id=BUSINESS_ID, actor=EMPLOYEE)


# -- bulk -----------------------------------------------------------------


async def test_bulk_approve_only_touches_submitted_rows_in_business(svc, repo):
    ids = [1, 2, 4, 6, 999]
    result = await svc.bulk_approve(business_id=BUSINESS_ID, actor=MANAGER, entry_ids=ids)

    assert result.modified <= result.matched <= len(ids)
    assert result.matched == 2
    assert {e.entry_id for e in result.updated} == {1, 2, 4}

    by_id = {e.entry_id: e for e in result.updated}
    assert by_id[1].status == TimeEntryStatus.APPROVED
    assert by_id[1].approved_by is None
    assert by_id[2].status == TimeEntryStatus.APPROVED
    assert by_id[2].approved_by == MANAGER_ID
    assert by_id[4].status == TimeEntryStatus.APPROVED

    # Foreign-business row is untouched.
    assert (await repo.get_by_id(6)).status == TimeEntryStatus.SUBMITTED


async def test_bulk_reject_sets_reason(svc):
    result = await svc.bulk_reject(business_id=BUSINESS_ID, actor=MANAGER, entry_ids=[2, 3], reason="missing break")
    assert result.matched == 1
    by_id = {e.entry_id: e for e in result.updated}
    assert by_id[2].status == TimeEntryStatus.REJECTED
    assert by_id[2].rejection_reason == "missing break"
    assert by_id[3].status == TimeEntryStatus.DRAFT


@pytest.mark.parametrize("entry_ids", [[], None, "1,2", [0], ["x"]])
async def test_bulk_rejects_bad_id_lists(svc, entry_ids):
    with pytest.raises(ValidationError):
        await svc.bulk_approve(business_id=BUSINESS_ID, actor=MANAGER, entry_ids=entry_ids)


async def test_bulk_reject_requires_reason_and_manager(svc):
    with pytest.raises(ValidationError):
        await svc.bulk_reject(business_id=BUSINESS_ID, actor=MANAGER, entry_ids=[2], reason=" ")
    with pytest.raises(AuthorizationError):
        await svc.bulk_reject(business_id=BUSINESS_ID, actor=EMPLOYEE, entry_ids=[2], reason="nope")


# -- summary ----------------------------------------------------------------


async def test_summary_counts_and_totals(svc):
    summary = await svc.get_summary(business_id=BUSINESS_ID, actor=MANAGER, date_from="2024-01-05")

    assert summary.date_from == "2024-01-05"
    assert summary.date_to is None
    assert summary.counts == {"draft": 1, "submitted": 1, "approved": 0, "rejected": 0, "void": 1}
    # 450 (draft, 30 min break) + 480 (submitted) + 120 (void)
    assert summary.total_paid_minutes == 1050
    assert summary.total_break_minutes == 30


async def test_summary_mine_for_employee(svc):
    summary = await svc.get_summary(business_id=BUSINESS_ID, actor=EMPLOYEE, mine=True)
    assert sum(summary.counts.values()) == 3
    assert summary.total_paid_minutes == 480 + 480 + 450

    with pytest.raises(AuthorizationError):
        await svc.get_summary(business_id=BUSINESS_ID, actor=EMPLOYEE)
    with pytest.raises(AuthorizationError):
        await svc.get_summary(business_id=BUSINESS_ID, actor=EMPLOYEE, user_id=OTHER_EMPLOYEE_ID)


async def test_summary_skips_malformed_rows_and_rounds(repo):
    repo.add(work_date="2024-01-08", start_time="bad", end_time="17:00")
    repo.add(work_date="2024-01-08", start_time="12:00", end_time="12:07", user_id=OTHER_EMPLOYEE_ID)
    settings = InMemorySettings({BUSINESS_ID: TimeTrackingSettings(15, RoundingMode.NEAREST)})
    svc = TimeEntryService(repo, InMemoryMembers(), settings)

    summary = await svc.get_summary(business_id=BUSINESS_ID, actor=MANAGER, date_from="2024-01-08")
    assert summary.counts["draft"] == 2
    assert summary.total_paid_minutes == 7
    assert summary.total_paid_minutes_rounded == 0
