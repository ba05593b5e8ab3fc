"""Synchronous schema helpers used at startup and by scripts."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    target = DBConfig.from_dict(db_config)
    ensure_database_exists(db_config)

    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    conn = _connect(target)
    try:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Schema applied to %s@%s/%s", target.user, target.host, target.database)


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()


DEMO_BUSINESS = ("Demo Cafe", "demo-cafe")
DEMO_MEMBERS = (
    ("owner", "Olivia Owner", "owner123", "owner"),
    ("manager", "Max Manager", "manager123", "manager"),
    ("employee", "Erin Employee", "employee123", "employee"),
)


def ensure_demo_business(db_config: dict) -> int:
    """Upsert one business with an owner, a manager and an employee; returns its id."""
    from werkzeug.security import generate_password_hash

    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor(dictionary=True)
        name, slug = DEMO_BUSINESS
        cur.execute("SELECT business_id FROM businesses WHERE slug=%s", (slug,))
        row = cur.fetchone()
        if row:
            business_id = int(row["business_id"])
        else:
            cur.execute("INSERT INTO businesses (name, slug) VALUES (%s, %s)", (name, slug))
            business_id = int(cur.lastrowid)

        for username, display_name, password, role in DEMO_MEMBERS:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT user_id FROM users WHERE username=%s", (username,))
            if cur.fetchone():
                cur.execute(
                    "UPDATE users SET business_id=%s, display_name=%s, password_hash=%s, role=%s, status='active' "
                    "WHERE username=%s",
                    (business_id, display_name, password_hash, role, username),
                )
            else:
                cur.execute(
                    "INSERT INTO users (business_id, username, display_name, password_hash, role) "
                    "VALUES (%s, %s, %s, %s, %s)",
                    (business_id, username, display_name, password_hash, role),
                )
        conn.commit()
    finally:
        conn.close()
    logger.info("Demo business %s ready with %s members", business_id, len(DEMO_MEMBERS))
    return business_id
