from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import PaymentType, Role, TimeEntryStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, optional_float, optional_int
from ..shifts.model import ShiftCategory
from .model import StaffMember, TimeEntryCostRow, UserRate
from .repository import PayrollRepository

_STAFF_COLUMNS = "user_id, name, role, payment_type, monthly_salary, contracted_hours"


def _to_rate(r: dict) -> UserRate:
    return UserRate(
        user_id=int(r["user_id"]),
        category_id=int(r["category_id"]),
        hourly_rate=float(r["hourly_rate"]),
    )


def _to_staff(r: dict, rates: Sequence[UserRate]) -> StaffMember:
    return StaffMember(
        user_id=int(r["user_id"]),
        name=r["name"],
        role=Role(r["role"]),
        payment_type=PaymentType(r["payment_type"]),
        monthly_salary=optional_float(r.get("monthly_salary")),
        contracted_hours=optional_float(r.get("contracted_hours")),
        rates=tuple(rates),
    )


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_staff(self, organization_id: int, *, location_id: Optional[int] = None) -> Sequence[StaffMember]:
        clauses = ["organization_id=%s"]
        params: list[object] = [int(organization_id)]
        if location_id is not None:
            clauses.append("primary_location_id=%s")
            params.append(int(location_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_STAFF_COLUMNS} FROM users WHERE {' AND '.join(clauses)} ORDER BY name ASC",
                tuple(params),
            )
            users = fetchall(cur)

            cur.execute(
                """
                SELECT r.user_id, r.category_id, r.hourly_rate
                FROM user_category_rates r
                JOIN users u ON u.user_id = r.user_id
                WHERE u.organization_id=%s
                """,
                (int(organization_id),),
            )
            rates_by_user: dict[int, list[UserRate]] = {}
            for r in fetchall(cur):
                rate = _to_rate(r)
                rates_by_user.setdefault(rate.user_id, []).append(rate)

        return [_to_staff(u, rates_by_user.get(int(u["user_id"]), [])) for u in users]

    def get_staff_member(self, *, organization_id: int, user_id: int) -> Optional[StaffMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_STAFF_COLUMNS} FROM users WHERE user_id=%s AND organization_id=%s",
                (int(user_id), int(organization_id)),
            )
            row = fetchone(cur)
            if not row:
                return None
        return _to_staff(row, self.list_user_rates(user_id))

    def list_entry_rows(
        self,
        *,
        organization_id: int,
        start: datetime,
        end: datetime,
        status: Optional[TimeEntryStatus] = None,
        shift_location_id: Optional[int] = None,
        primary_location_id: Optional[int] = None,
    ) -> Sequence[TimeEntryCostRow]:
        clauses = [
            "u.organization_id=%s",
            "t.clock_in>=%s",
            "t.clock_in<=%s",
            "t.clock_out IS NOT NULL",
        ]
        params: list[object] = [int(organization_id), start, end]
        if status is not None:
            clauses.append("t.status=%s")
            params.append(status.value)
        if shift_location_id is not None:
            clauses.append("s.location_id=%s")
            params.append(int(shift_location_id))
        if primary_location_id is not None:
            clauses.append("u.primary_location_id=%s")
            params.append(int(primary_location_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT t.time_entry_id, t.user_id, t.clock_in, t.clock_out, t.total_break_minutes,
                       t.status, t.notes,
                       u.name AS user_name, u.email AS user_email, u.role, u.payment_type,
                       s.category_id, c.name AS category_name, c.hourly_rate AS category_rate,
                       s.location_id, l.name AS location_name,
                       pl.name AS primary_location_name
                FROM time_entries t
                JOIN users u ON u.user_id = t.user_id
                LEFT JOIN shifts s ON s.shift_id = t.shift_id
                LEFT JOIN shift_categories c ON c.category_id = s.category_id
                LEFT JOIN locations l ON l.location_id = s.location_id
                LEFT JOIN locations pl ON pl.location_id = u.primary_location_id
                WHERE {' AND '.join(clauses)}
                ORDER BY u.name ASC, t.clock_in ASC
                """,
                tuple(params),
            )
            rows = fetchall(cur)

        return [
            TimeEntryCostRow(
                time_entry_id=int(r["time_entry_id"]),
                user_id=int(r["user_id"]),
                user_name=r["user_name"],
                user_email=r["user_email"],
                role=Role(r["role"]),
                payment_type=PaymentType(r["payment_type"]),
                clock_in=r["clock_in"],
                clock_out=r.get("clock_out"),
                total_break_minutes=int(r.get("total_break_minutes") or 0),
                status=TimeEntryStatus(r["status"]),
                category_id=optional_int(r.get("category_id")),
                category_name=r.get("category_name"),
                category_rate=optional_float(r.get("category_rate")),
                location_id=optional_int(r.get("location_id")),
                location_name=r.get("location_name"),
                primary_location_name=r.get("primary_location_name"),
                notes=r.get("notes"),
            )
            for r in rows
        ]

    def list_categories(self, organization_id: int, *, active_only: bool = True) -> Sequence[ShiftCategory]:
        where = "organization_id=%s AND is_active=1" if active_only else "organization_id=%s"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT category_id, organization_id, name, hourly_rate, is_active
                FROM shift_categories
                WHERE {where}
                ORDER BY created_at ASC, category_id ASC
                """,
                (int(organization_id),),
            )
            return [
                ShiftCategory(
                    category_id=int(r["category_id"]),
                    organization_id=int(r["organization_id"]),
                    name=r["name"],
                    hourly_rate=float(r["hourly_rate"]),
                    is_active=bool(r.get("is_active", 1)),
                )
                for r in fetchall(cur)
            ]

    def list_user_rates(self, user_id: int) -> Sequence[UserRate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id, category_id, hourly_rate FROM user_category_rates WHERE user_id=%s",
                (int(user_id),),
            )
            return [_to_rate(r) for r in fetchall(cur)]

    def upsert_user_rate(self, *, user_id: int, category_id: int, hourly_rate: float) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO user_category_rates(user_id, category_id, hourly_rate)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE hourly_rate=VALUES(hourly_rate)
                """,
                (int(user_id), int(category_id), float(hourly_rate)),
            )

    def delete_user_rate(self, *, user_id: int, category_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM user_category_rates WHERE user_id=%s AND category_id=%s",
                (int(user_id), int(category_id)),
            )
