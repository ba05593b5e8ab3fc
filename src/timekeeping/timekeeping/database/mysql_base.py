from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Tuple

from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@asynccontextmanager
async def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True) -> AsyncIterator[Tuple[Any, Any]]:
    conn = await conn_factory.connect()
    try:
        cur = await conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            await conn.commit()
        finally:
            await cur.close()
    except Exception:
        logger.exception("Rolling back MySQL transaction")
        await conn.rollback()
        raise
    finally:
        await conn.close()


async def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = await cur.fetchone()
    return row if row else None


async def fetchall(cur) -> List[Dict[str, Any]]:
    rows = await cur.fetchall()
    return list(rows or [])


def in_clause(values: Sequence[Any]) -> str:
    """Placeholder list for `IN (...)`; callers guarantee a non-empty sequence."""
    return ", ".join(["%s"] * len(values))


def to_mysql_datetime(value: Optional[datetime]) -> Optional[datetime]:
    """DATETIME columns store naive UTC."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def from_mysql_datetime(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
