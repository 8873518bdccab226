from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cursor)``; commit on success, roll back on any error."""
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def optional_float(value: Any) -> Optional[float]:
    """DECIMAL/DOUBLE column to float, keeping NULL as None."""
    if value is None:
        return None
    return float(value)


def optional_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    return int(value)
