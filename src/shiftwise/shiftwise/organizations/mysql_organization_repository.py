from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import BreakCalculationMode
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, optional_float
from .model import Location, OrganizationSettings
from .repository import OrganizationRepository

_LOCATION_COLUMNS = """
    location_id, organization_id, name, break_rules,
    latitude, longitude, clock_in_radius_metres, is_active
"""


def _to_location(r: dict) -> Location:
    return Location(
        location_id=int(r["location_id"]),
        organization_id=int(r["organization_id"]),
        name=r["name"],
        break_rules=r.get("break_rules"),
        latitude=optional_float(r.get("latitude")),
        longitude=optional_float(r.get("longitude")),
        clock_in_radius_metres=int(r.get("clock_in_radius_metres") or 0),
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLOrganizationRepository(OrganizationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_settings(self, organization_id: int) -> Optional[OrganizationSettings]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT organization_id, name, break_rules, break_calculation_mode,
                       clock_in_window_minutes, clock_out_grace_minutes,
                       latitude, longitude, clock_in_radius_metres,
                       require_geolocation, require_scheduled_shift
                FROM organizations
                WHERE organization_id=%s
                """,
                (int(organization_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return OrganizationSettings(
                organization_id=int(r["organization_id"]),
                name=r["name"],
                break_rules=r.get("break_rules") or "[]",
                break_calculation_mode=BreakCalculationMode(r.get("break_calculation_mode") or "PER_SHIFT"),
                clock_in_window_minutes=int(r["clock_in_window_minutes"]),
                clock_out_grace_minutes=int(r["clock_out_grace_minutes"]),
                latitude=optional_float(r.get("latitude")),
                longitude=optional_float(r.get("longitude")),
                clock_in_radius_metres=int(r["clock_in_radius_metres"]),
                require_geolocation=bool(r["require_geolocation"]),
                require_scheduled_shift=bool(r["require_scheduled_shift"]),
            )

    def get_location(self, location_id: int) -> Optional[Location]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_LOCATION_COLUMNS} FROM locations WHERE location_id=%s",
                (int(location_id),),
            )
            r = fetchone(cur)
            return _to_location(r) if r else None

    def list_locations(self, organization_id: int, *, active_only: bool = True) -> Sequence[Location]:
        where = "organization_id=%s"
        if active_only:
            where += " AND is_active=1"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_LOCATION_COLUMNS} FROM locations WHERE {where} ORDER BY name ASC",
                (int(organization_id),),
            )
            return [_to_location(r) for r in fetchall(cur)]

    def update_break_rules(
        self,
        *,
        organization_id: int,
        break_rules: str,
        break_calculation_mode: Optional[BreakCalculationMode] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            if break_calculation_mode is None:
                cur.execute(
                    "UPDATE organizations SET break_rules=%s WHERE organization_id=%s",
                    (break_rules, int(organization_id)),
                )
            else:
                cur.execute(
                    """
                    UPDATE organizations
                    SET break_rules=%s, break_calculation_mode=%s
                    WHERE organization_id=%s
                    """,
                    (break_rules, break_calculation_mode.value, int(organization_id)),
                )
            return cur.rowcount > 0

    def update_location_break_rules(self, *, location_id: int, break_rules: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE locations SET break_rules=%s WHERE location_id=%s",
                (break_rules, int(location_id)),
            )
            return cur.rowcount > 0
