from __future__ import annotations

from dataclasses import dataclass

from .database.connection import DBConfig, DatabaseConnection
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.repository import ShiftRepository
from .shifts.service import ShiftService
from .time_entries.mysql_time_entry_repository import MySQLTimeEntryRepository
from .time_entries.repository import TimeEntryRepository
from .time_entries.service import TimeEntryService
from .users.mysql_user_repository import MySQLMemberRepository, MySQLSettingsRepository
from .users.repository import MemberRepository, SettingsRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    members_repo: MemberRepository
    settings_repo: SettingsRepository
    time_entries_repo: TimeEntryRepository
    shifts_repo: ShiftRepository

    auth_service: AuthService
    time_entry_service: TimeEntryService
    shift_service: ShiftService


def build_services(
    *,
    members_repo: MemberRepository,
    settings_repo: SettingsRepository,
    time_entries_repo: TimeEntryRepository,
    shifts_repo: ShiftRepository,
) -> Container:
    """Wire services over any repository implementation (MySQL or in-memory fakes)."""
    return Container(
        members_repo=members_repo,
        settings_repo=settings_repo,
        time_entries_repo=time_entries_repo,
        shifts_repo=shifts_repo,
        auth_service=AuthService(members_repo),
        time_entry_service=TimeEntryService(time_entries_repo, members_repo, settings_repo),
        shift_service=ShiftService(shifts_repo),
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return build_services(
        members_repo=MySQLMemberRepository(conn),
        settings_repo=MySQLSettingsRepository(conn),
        time_entries_repo=MySQLTimeEntryRepository(conn),
        shifts_repo=MySQLShiftRepository(conn),
    )
