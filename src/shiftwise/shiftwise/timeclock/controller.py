from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import now_local, parse_iso_datetime
from ..common.validators import optional_coordinate, require_int
from ..common.web import (
    current_organization_id,
    current_role,
    current_user_id,
    json_body,
    login_required,
    manager_required,
)
from ..container import Container
from ..core.exceptions import ValidationError
from .model import ClockInAttempt


def register(app: Flask, container: Container) -> None:
    @app.route("/api/time-entries/clock-in", methods=["POST"], endpoint="api_clock_in")
    @login_required
    def api_clock_in():
        data = json_body()
        shift_id = data.get("shiftId")
        attempt = ClockInAttempt(
            timestamp=now_local(),
            latitude=optional_coordinate(data.get("latitude"), "latitude", limit=90),
            longitude=optional_coordinate(data.get("longitude"), "longitude", limit=180),
            shift_id=require_int(shift_id, "shiftId", minimum=1) if shift_id is not None else None,
        )
        entry = container.time_clock_service.clock_in(
            user_id=current_user_id(),
            organization_id=current_organization_id(),
            attempt=attempt,
        )
        return jsonify(entry.to_dict()), 201

    @app.route("/api/time-entries/clock-out", methods=["POST"], endpoint="api_clock_out")
    @login_required
    def api_clock_out():
        data = json_body()
        result = container.time_clock_service.clock_out(
            user_id=current_user_id(),
            organization_id=current_organization_id(),
            time_entry_id=require_int(data.get("timeEntryId"), "timeEntryId", minimum=1),
            now=now_local(),
        )
        return jsonify({**result.entry.to_dict(), "warning": result.warning})

    @app.route("/api/time-entries/break", methods=["POST"], endpoint="api_break")
    @login_required
    def api_break():
        data = json_body()
        time_entry_id = require_int(data.get("timeEntryId"), "timeEntryId", minimum=1)
        action = data.get("action")

        if action == "start":
            entry = container.time_clock_service.start_break(
                user_id=current_user_id(), time_entry_id=time_entry_id, now=now_local()
            )
        elif action == "end":
            entry = container.time_clock_service.end_break(
                user_id=current_user_id(), time_entry_id=time_entry_id, now=now_local()
            )
        else:
            raise ValidationError("Invalid action")
        return jsonify(entry.to_dict())

    @app.route("/api/time-entries/<int:time_entry_id>", methods=["PATCH"], endpoint="api_review_time_entry")
    @manager_required
    def api_review_time_entry(time_entry_id: int):
        entry = container.time_clock_service.review_entry(
            current_role=current_role(),
            organization_id=current_organization_id(),
            time_entry_id=time_entry_id,
            changes=json_body(),
        )
        return jsonify(entry.to_dict())

    @app.route("/api/time-entries/manual", methods=["POST"], endpoint="api_manual_time_entry")
    @manager_required
    def api_manual_time_entry():
        data = json_body()
        shift_id = data.get("shiftId")
        total_break = data.get("totalBreak")
        entry = container.time_clock_service.create_manual_entry(
            current_role=current_role(),
            organization_id=current_organization_id(),
            user_id=require_int(data.get("userId"), "userId", minimum=1),
            clock_in=parse_iso_datetime(data.get("clockIn"), "clockIn"),
            clock_out=parse_iso_datetime(data.get("clockOut"), "clockOut"),
            total_break_minutes=require_int(total_break, "totalBreak", minimum=0) if total_break is not None else 0,
            notes=data.get("notes") or None,
            shift_id=require_int(shift_id, "shiftId", minimum=1) if shift_id else None,
        )
        return jsonify(entry.to_dict()), 201
