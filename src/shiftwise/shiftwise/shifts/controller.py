from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import parse_iso_datetime
from ..common.validators import require_int
from ..common.web import current_organization_id, current_role, current_user_id, json_body, login_required
from ..container import Container


def _optional_id(data: dict, key: str) -> int | None:
    value = data.get(key)
    if value in (None, ""):
        return None
    return require_int(value, key, minimum=1)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/shifts", methods=["POST"], endpoint="api_create_shift")
    @login_required
    def api_create_shift():
        data = json_body()
        shift = container.shift_service.create_shift(
            current_role=current_role(),
            organization_id=current_organization_id(),
            created_by_id=current_user_id(),
            title=data.get("title") or "",
            start_time=parse_iso_datetime(data.get("startTime"), "startTime"),
            end_time=parse_iso_datetime(data.get("endTime"), "endTime"),
            description=data.get("description") or None,
            assigned_to_id=_optional_id(data, "assignedToId"),
            location_id=_optional_id(data, "locationId"),
            category_id=_optional_id(data, "categoryId"),
        )
        return jsonify(shift.to_dict()), 201
