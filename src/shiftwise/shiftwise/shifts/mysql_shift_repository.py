from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import ShiftStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, optional_int
from .model import Shift
from .repository import ShiftRepository

_COLUMNS = """
    shift_id, organization_id, title, description, start_time, end_time, status,
    assigned_to_id, location_id, category_id, scheduled_break_minutes
"""


def _to_shift(r: dict) -> Shift:
    return Shift(
        shift_id=int(r["shift_id"]),
        organization_id=int(r["organization_id"]),
        title=r["title"],
        description=r.get("description"),
        start_time=r["start_time"],
        end_time=r["end_time"],
        status=ShiftStatus(r["status"]),
        assigned_to_id=optional_int(r.get("assigned_to_id")),
        location_id=optional_int(r.get("location_id")),
        category_id=optional_int(r.get("category_id")),
        scheduled_break_minutes=int(r.get("scheduled_break_minutes") or 0),
    )


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM shifts WHERE shift_id=%s", (int(shift_id),))
            r = fetchone(cur)
            return _to_shift(r) if r else None

    def create(
        self,
        *,
        organization_id: int,
        title: str,
        description: Optional[str],
        start_time: datetime,
        end_time: datetime,
        assigned_to_id: Optional[int],
        created_by_id: int,
        location_id: Optional[int],
        category_id: Optional[int],
        scheduled_break_minutes: int,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO shifts(
                    organization_id, title, description, start_time, end_time, status,
                    assigned_to_id, created_by_id, location_id, category_id, scheduled_break_minutes
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(organization_id),
                    title,
                    description,
                    start_time,
                    end_time,
                    ShiftStatus.SCHEDULED.value,
                    assigned_to_id,
                    int(created_by_id),
                    location_id,
                    category_id,
                    int(scheduled_break_minutes),
                ),
            )
            return int(cur.lastrowid)

    def list_scheduled_for_user(
        self,
        *,
        user_id: int,
        starts_before: datetime,
        ends_after: datetime,
    ) -> Sequence[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM shifts
                WHERE assigned_to_id=%s AND status=%s AND start_time<=%s AND end_time>=%s
                ORDER BY start_time ASC
                """,
                (int(user_id), ShiftStatus.SCHEDULED.value, starts_before, ends_after),
            )
            return [_to_shift(r) for r in fetchall(cur)]

    def list_for_organization(
        self,
        *,
        organization_id: int,
        start: datetime,
        end: datetime,
        location_id: Optional[int] = None,
    ) -> Sequence[Shift]:
        clauses = ["organization_id=%s", "start_time>=%s", "start_time<%s"]
        params: list[object] = [int(organization_id), start, end]
        if location_id is not None:
            clauses.append("location_id=%s")
            params.append(int(location_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM shifts WHERE {where} ORDER BY start_time ASC",
                tuple(params),
            )
            return [_to_shift(r) for r in fetchall(cur)]
