from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


def _iter_sql_statements(sql: str) -> Iterable[str]:
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
            buf.append(ch)
            continue

        if ch == '"' and not in_single:
            in_double = not in_double
            buf.append(ch)
            continue

        if ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(conn_factory: DatabaseConnection) -> None:
    conn = conn_factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{conn_factory.database_name}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(conn_factory: DatabaseConnection, *, schema_path: str | Path) -> None:
    """Apply schema.sql (idempotent: CREATE TABLE IF NOT EXISTS)."""
    ensure_database_exists(conn_factory)
    sql = Path(schema_path).read_text(encoding="utf-8")

    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        count = 0
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
        logger.info("Applied %d schema statements to %s", count, conn_factory.database_name)
    finally:
        conn.close()


def list_tables(conn_factory: DatabaseConnection) -> list[str]:
    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
