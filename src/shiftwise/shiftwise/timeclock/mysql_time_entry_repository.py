from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.enums import TimeEntryStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, optional_float, optional_int
from .model import TimeEntry
from .repository import TimeEntryRepository

_COLUMNS = """
    time_entry_id, user_id, shift_id, clock_in, clock_out, break_start,
    total_break_minutes, status, clock_in_latitude, clock_in_longitude, notes
"""


def _to_entry(r: dict) -> TimeEntry:
    return TimeEntry(
        time_entry_id=int(r["time_entry_id"]),
        user_id=int(r["user_id"]),
        shift_id=optional_int(r.get("shift_id")),
        clock_in=r["clock_in"],
        clock_out=r.get("clock_out"),
        break_start=r.get("break_start"),
        total_break_minutes=int(r.get("total_break_minutes") or 0),
        status=TimeEntryStatus(r["status"]),
        clock_in_latitude=optional_float(r.get("clock_in_latitude")),
        clock_in_longitude=optional_float(r.get("clock_in_longitude")),
        notes=r.get("notes"),
    )


class MySQLTimeEntryRepository(TimeEntryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, time_entry_id: int) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM time_entries WHERE time_entry_id=%s", (int(time_entry_id),))
            r = fetchone(cur)
            return _to_entry(r) if r else None

    def get_open_for_user(self, user_id: int) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM time_entries
                WHERE user_id=%s AND clock_out IS NULL
                ORDER BY clock_in DESC
                LIMIT 1
                """,
                (int(user_id),),
            )
            r = fetchone(cur)
            return _to_entry(r) if r else None

    def create_clock_in(
        self,
        *,
        user_id: int,
        shift_id: Optional[int],
        clock_in: datetime,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO time_entries(user_id, shift_id, clock_in, status, clock_in_latitude, clock_in_longitude)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(user_id), shift_id, clock_in, TimeEntryStatus.PENDING.value, latitude, longitude),
            )
            return int(cur.lastrowid)

    def set_clock_out(self, *, time_entry_id: int, clock_out: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE time_entries SET clock_out=%s WHERE time_entry_id=%s AND clock_out IS NULL",
                (clock_out, int(time_entry_id)),
            )
            return cur.rowcount > 0

    def set_break_start(self, *, time_entry_id: int, break_start: Optional[datetime]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE time_entries SET break_start=%s WHERE time_entry_id=%s",
                (break_start, int(time_entry_id)),
            )
            return cur.rowcount > 0

    def finish_break(self, *, time_entry_id: int, total_break_minutes: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE time_entries
                SET break_start=NULL, total_break_minutes=%s
                WHERE time_entry_id=%s
                """,
                (int(total_break_minutes), int(time_entry_id)),
            )
            return cur.rowcount > 0

    def get_user_organization_id(self, user_id: int) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT organization_id FROM users WHERE user_id=%s", (int(user_id),))
            r = fetchone(cur)
            return int(r["organization_id"]) if r else None

    def create_manual(
        self,
        *,
        user_id: int,
        shift_id: Optional[int],
        clock_in: datetime,
        clock_out: datetime,
        total_break_minutes: int,
        status: TimeEntryStatus,
        notes: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO time_entries(user_id, shift_id, clock_in, clock_out, total_break_minutes, status, notes)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(user_id), shift_id, clock_in, clock_out, int(total_break_minutes), status.value, notes),
            )
            return int(cur.lastrowid)

    def update_review(
        self,
        *,
        time_entry_id: int,
        status: TimeEntryStatus,
        clock_in: datetime,
        clock_out: Optional[datetime],
        notes: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE time_entries
                SET status=%s, clock_in=%s, clock_out=%s, notes=%s
                WHERE time_entry_id=%s
                """,
                (status.value, clock_in, clock_out, notes, int(time_entry_id)),
            )
            return cur.rowcount > 0
