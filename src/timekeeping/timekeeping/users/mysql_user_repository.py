from __future__ import annotations

import logging
from typing import Optional

from ..core.constants import MAX_ROUNDING_MINUTES
from ..core.enums import MemberStatus, Role, RoundingMode
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Member, TimeTrackingSettings
from .repository import MemberRepository, SettingsRepository

logger = logging.getLogger(__name__)

_MEMBER_COLUMNS = "user_id, business_id, username, display_name, password_hash, role, status"


def _row_to_member(row: dict) -> Member:
    return Member(
        user_id=int(row["user_id"]),
        business_id=int(row["business_id"]),
        username=row["username"],
        display_name=row.get("display_name") or row["username"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        status=MemberStatus(row.get("status") or MemberStatus.ACTIVE.value),
    )


def _row_to_settings(business_id: int, row: Optional[dict]) -> TimeTrackingSettings:
    """Clamp bad stored values instead of failing every read for the tenant."""
    if not row:
        return TimeTrackingSettings()

    minutes = int(row.get("rounding_minutes") or 0)
    if not 0 <= minutes <= MAX_ROUNDING_MINUTES:
        logger.warning("Business %s has out-of-range rounding_minutes=%s", business_id, minutes)
        minutes = min(max(minutes, 0), MAX_ROUNDING_MINUTES)

    raw_mode = row.get("rounding_mode") or RoundingMode.NEAREST.value
    try:
        mode = RoundingMode(raw_mode)
    except ValueError:
        logger.warning("Business %s has unknown rounding_mode=%r, using nearest", business_id, raw_mode)
        mode = RoundingMode.NEAREST

    return TimeTrackingSettings(rounding_minutes=minutes, rounding_mode=mode)


class MySQLMemberRepository(MemberRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    async def get_in_business(self, business_id: int, user_id: int) -> Optional[Member]:
        async with db_cursor(self._conn_factory) as (_, cur):
            await cur.execute(
                f"SELECT {_MEMBER_COLUMNS} FROM users WHERE user_id=%s AND business_id=%s",
                (int(user_id), int(business_id)),
            )
            row = await fetchone(cur)
            return _row_to_member(row) if row else None

    async def get_by_username(self, username: str) -> Optional[Member]:
        async with db_cursor(self._conn_factory) as (_, cur):
            await cur.execute(f"SELECT {_MEMBER_COLUMNS} FROM users WHERE username=%s", (username,))
            row = await fetchone(cur)
            return _row_to_member(row) if row else None


class MySQLSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    async def get_time_tracking(self, business_id: int) -> TimeTrackingSettings:
        async with db_cursor(self._conn_factory) as (_, cur):
            await cur.execute(
                "SELECT rounding_minutes, rounding_mode FROM businesses WHERE business_id=%s",
                (int(business_id),),
            )
            row = await fetchone(cur)

        return _row_to_settings(business_id, row)
