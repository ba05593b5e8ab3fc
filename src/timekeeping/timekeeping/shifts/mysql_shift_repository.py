from __future__ import annotations

from typing import Any, Optional, Sequence

from ..common.datetime_utils import now_utc
from ..core.enums import ShiftStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_mysql_datetime, to_mysql_datetime
from .model import NewShift, Shift
from .repository import ShiftQuery, ShiftRepository

_COLUMNS = """
    shift_id, business_id, user_id, location_id, start_at, end_at, role_tag, notes,
    status, published_at, created_by, updated_by, created_at, updated_at
"""


def _row_to_shift(r: dict) -> Shift:
    return Shift(
        shift_id=int(r["shift_id"]),
        business_id=int(r["business_id"]),
        user_id=int(r["user_id"]) if r.get("user_id") is not None else None,
        location_id=r.get("location_id"),
        start_at=from_mysql_datetime(r["start_at"]),
        end_at=from_mysql_datetime(r["end_at"]),
        role_tag=r.get("role_tag"),
        notes=r.get("notes"),
        status=ShiftStatus(r["status"]),
        published_at=from_mysql_datetime(r.get("published_at")),
        created_by=r.get("created_by"),
        updated_by=r.get("updated_by"),
        created_at=from_mysql_datetime(r.get("created_at")),
        updated_at=from_mysql_datetime(r.get("updated_at")),
    )


def _where(query: ShiftQuery) -> tuple[str, list[Any]]:
    clauses = ["business_id=%s"]
    params: list[Any] = [int(query.business_id)]

    if query.user_id is not None:
        clauses.append("user_id=%s")
        params.append(int(query.user_id))
    if query.visible_to_user_id is not None:
        if query.include_open:
            clauses.append("(user_id=%s OR (user_id IS NULL AND status=%s))")
            params.extend([int(query.visible_to_user_id), ShiftStatus.PUBLISHED.value])
        else:
            clauses.append("user_id=%s")
            params.append(int(query.visible_to_user_id))
    if query.status is not None:
        clauses.append("status=%s")
        params.append(query.status.value)
    if query.exclude_status is not None:
        clauses.append("status<>%s")
        params.append(query.exclude_status.value)
    if query.starts_from is not None:
        clauses.append("start_at>=%s")
        params.append(to_mysql_datetime(query.starts_from))
    if query.starts_to is not None:
        clauses.append("start_at<=%s")
        params.append(to_mysql_datetime(query.starts_to))
    if query.overlaps is not None:
        start, end = query.overlaps
        clauses.append("start_at<%s AND end_at>%s")
        params.extend([to_mysql_datetime(end), to_mysql_datetime(start)])
    if query.exclude_id is not None:
        clauses.append("shift_id<>%s")
        params.append(int(query.exclude_id))

    return " AND ".join(clauses), params


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    async def get_by_id(self, shift_id: int) -> Optional[Shift]:
        async with db_cursor(self._conn_factory) as (_, cur):
            await cur.execute(f"SELECT {_COLUMNS} FROM shifts WHERE shift_id=%s", (int(shift_id),))
            r = await fetchone(cur)
            return _row_to_shift(r) if r else None

    async def list_shifts(self, query: ShiftQuery) -> Sequence[Shift]:
        where, params = _where(query)
        async with db_cursor(self._conn_factory) as (_, cur):
            await cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM shifts
                WHERE {where}
                ORDER BY start_at ASC
                """,
                tuple(params),
            )
            return [_row_to_shift(r) for r in await fetchall(cur)]

    async def create(self, shift: NewShift) -> Shift:
        now = to_mysql_datetime(now_utc())
        async with db_cursor(self._conn_factory) as (_, cur):
            await cur.execute(
                """
                INSERT INTO shifts(
                    business_id, user_id, location_id, start_at, end_at, role_tag, notes,
                    status, created_by, updated_by, created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(shift.business_id),
                    shift.user_id,
                    shift.location_id,
                    to_mysql_datetime(shift.start_at),
                    to_mysql_datetime(shift.end_at),
                    shift.role_tag,
                    shift.notes,
                    ShiftStatus.DRAFT.value,
                    int(shift.created_by),
                    int(shift.created_by),
                    now,
                    now,
                ),
            )
            shift_id = int(cur.lastrowid)
            await cur.execute(f"SELECT {_COLUMNS} FROM shifts WHERE shift_id=%s", (shift_id,))
            return _row_to_shift(await fetchone(cur))

    async def save(self, shift: Shift) -> Shift:
        async with db_cursor(self._conn_factory) as (_, cur):
            await cur.execute(
                """
                UPDATE shifts
                SET user_id=%s, location_id=%s, start_at=%s, end_at=%s, role_tag=%s, notes=%s,
                    status=%s, published_at=%s, updated_by=%s, updated_at=%s
                WHERE shift_id=%s AND business_id=%s
                """,
                (
                    shift.user_id,
                    shift.location_id,
                    to_mysql_datetime(shift.start_at),
                    to_mysql_datetime(shift.end_at),
                    shift.role_tag,
                    shift.notes,
                    shift.status.value,
                    to_mysql_datetime(shift.published_at),
                    shift.updated_by,
                    to_mysql_datetime(now_utc()),
                    int(shift.shift_id),
                    int(shift.business_id),
                ),
            )
            await cur.execute(f"SELECT {_COLUMNS} FROM shifts WHERE shift_id=%s", (int(shift.shift_id),))
            return _row_to_shift(await fetchone(cur))
