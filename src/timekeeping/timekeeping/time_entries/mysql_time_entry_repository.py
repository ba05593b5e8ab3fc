from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import now_utc
from ..core.enums import EntryType, TimeEntryStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    from_mysql_datetime,
    in_clause,
    to_mysql_datetime,
)
from .model import NewTimeEntry, TimeEntry
from .repository import BulkUpdateCount, TimeEntryQuery, TimeEntryRepository

_COLUMNS = """
    entry_id, business_id, user_id, entry_type, work_date, start_time, end_time,
    break_minutes, status, location_id, notes, created_by, updated_by,
    submitted_at, approved_by, approved_at, rejection_reason, created_at, updated_at
"""

# Columns a bulk transition may set.
_BULK_COLUMNS = {"approved_by", "approved_at", "rejection_reason", "updated_by"}


def _row_to_entry(r: dict) -> TimeEntry:
    return TimeEntry(
        entry_id=int(r["entry_id"]),
        business_id=int(r["business_id"]),
        user_id=int(r["user_id"]),
        entry_type=EntryType(r["entry_type"]),
        work_date=r.get("work_date"),
        start_time=r.get("start_time"),
        end_time=r.get("end_time"),
        break_minutes=int(r.get("break_minutes") or 0),
        status=TimeEntryStatus(r["status"]),
        location_id=r.get("location_id"),
        notes=r.get("notes"),
        created_by=r.get("created_by"),
        updated_by=r.get("updated_by"),
        submitted_at=from_mysql_datetime(r.get("submitted_at")),
        approved_by=r.get("approved_by"),
        approved_at=from_mysql_datetime(r.get("approved_at")),
        rejection_reason=r.get("rejection_reason"),
        created_at=from_mysql_datetime(r.get("created_at")),
        updated_at=from_mysql_datetime(r.get("updated_at")),
    )


def _where(query: TimeEntryQuery) -> tuple[str, list[Any]]:
    clauses = ["business_id=%s"]
    params: list[Any] = [int(query.business_id)]

    if query.entry_type is not None:
        clauses.append("entry_type=%s")
        params.append(query.entry_type.value)
    if query.user_id is not None:
        clauses.append("user_id=%s")
        params.append(int(query.user_id))
    if query.status is not None:
        clauses.append("status=%s")
        params.append(query.status.value)
    if query.exclude_status is not None:
        clauses.append("status<>%s")
        params.append(query.exclude_status.value)
    if query.work_date is not None:
        clauses.append("work_date=%s")
        params.append(query.work_date)
    # work_date is CHAR(10) YYYY-MM-DD, string comparison matches date order.
    if query.date_from is not None:
        clauses.append("work_date>=%s")
        params.append(query.date_from)
    if query.date_to is not None:
        clauses.append("work_date<=%s")
        params.append(query.date_to)
    if query.entry_ids is not None:
        if not query.entry_ids:
            clauses.append("1=0")
        else:
            clauses.append(f"entry_id IN ({in_clause(query.entry_ids)})")
            params.extend(int(i) for i in query.entry_ids)
    if query.exclude_id is not None:
        clauses.append("entry_id<>%s")
        params.append(int(query.exclude_id))

    return " AND ".join(clauses), params


class MySQLTimeEntryRepository(TimeEntryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    async def get_by_id(self, entry_id: int) -> Optional[TimeEntry]:
        async with db_cursor(self._conn_factory) as (_, cur):
            await cur.execute(f"SELECT {_COLUMNS} FROM time_entries WHERE entry_id=%s", (int(entry_id),))
            r = await fetchone(cur)
            return _row_to_entry(r) if r else None

    async def list_entries(self, query: TimeEntryQuery) -> Sequence[TimeEntry]:
        where, params = _where(query)
        async with db_cursor(self._conn_factory) as (_, cur):
            await cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM time_entries
                WHERE {where}
                ORDER BY work_date DESC, start_time DESC
                """,
                tuple(params),
            )
            return [_row_to_entry(r) for r in await fetchall(cur)]

    async def create(self, entry: NewTimeEntry) -> TimeEntry:
        now = to_mysql_datetime(now_utc())
        async with db_cursor(self._conn_factory) as (_, cur):
            await cur.execute(
                """
                INSERT INTO time_entries(
                    business_id, user_id, entry_type, work_date, start_time, end_time,
                    break_minutes, status, location_id, notes, created_by, updated_by,
                    created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(entry.business_id),
                    int(entry.user_id),
                    EntryType.MANUAL.value,
                    entry.work_date,
                    entry.start_time,
                    entry.end_time,
                    int(entry.break_minutes),
                    TimeEntryStatus.DRAFT.value,
                    entry.location_id,
                    entry.notes,
                    int(entry.created_by),
                    int(entry.created_by),
                    now,
                    now,
                ),
            )
            entry_id = int(cur.lastrowid)
            await cur.execute(f"SELECT {_COLUMNS} FROM time_entries WHERE entry_id=%s", (entry_id,))
            return _row_to_entry(await fetchone(cur))

    async def save(self, entry: TimeEntry) -> TimeEntry:
        async with db_cursor(self._conn_factory) as (_, cur):
            await cur.execute(
                """
                UPDATE time_entries
                SET work_date=%s, start_time=%s, end_time=%s, break_minutes=%s, status=%s,
                    location_id=%s, notes=%s, updated_by=%s, submitted_at=%s, approved_by=%s,
                    approved_at=%s, rejection_reason=%s, updated_at=%s
                WHERE entry_id=%s AND business_id=%s
                """,
                (
                    entry.work_date,
                    entry.start_time,
                    entry.end_time,
                    int(entry.break_minutes),
                    entry.status.value,
                    entry.location_id,
                    entry.notes,
                    entry.updated_by,
                    to_mysql_datetime(entry.submitted_at),
                    entry.approved_by,
                    to_mysql_datetime(entry.approved_at),
                    entry.rejection_reason,
                    to_mysql_datetime(now_utc()),
                    int(entry.entry_id),
                    int(entry.business_id),
                ),
            )
            await cur.execute(f"SELECT {_COLUMNS} FROM time_entries WHERE entry_id=%s", (int(entry.entry_id),))
            return _row_to_entry(await fetchone(cur))

    async def bulk_transition(
        self,
        *,
        business_id: int,
        entry_ids: Sequence[int],
        from_status: TimeEntryStatus,
        to_status: TimeEntryStatus,
        changes: Mapping[str, Any],
    ) -> BulkUpdateCount:
        unknown = set(changes) - _BULK_COLUMNS
        if unknown:
            raise ValueError(f"Unsupported bulk columns: {sorted(unknown)}")
        if not entry_ids:
            return BulkUpdateCount(matched=0, modified=0)

        ids = [int(i) for i in entry_ids]
        match_where = (
            f"entry_id IN ({in_clause(ids)}) AND business_id=%s AND entry_type=%s AND status=%s"
        )
        match_params = (*ids, int(business_id), EntryType.MANUAL.value, from_status.value)

        assignments = ["status=%s", "updated_at=%s"]
        values: list[Any] = [to_status.value, to_mysql_datetime(now_utc())]
        for column, value in changes.items():
            assignments.append(f"{column}=%s")
            values.append(to_mysql_datetime(value) if column.endswith("_at") else value)

        async with db_cursor(self._conn_factory) as (_, cur):
            # The UPDATE below is the atomic step; the count is informational.
            await cur.execute(f"SELECT COUNT(*) AS n FROM time_entries WHERE {match_where}", match_params)
            matched = int((await fetchone(cur) or {}).get("n") or 0)
            await cur.execute(
                f"UPDATE time_entries SET {', '.join(assignments)} WHERE {match_where}",
                (*values, *match_params),
            )
            modified = int(cur.rowcount or 0)

        return BulkUpdateCount(matched=max(matched, modified), modified=modified)
