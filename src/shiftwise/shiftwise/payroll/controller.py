from __future__ import annotations

import io
from datetime import date

from flask import Flask, jsonify, request, send_file

from ..common.datetime_utils import parse_iso_date
from ..common.web import (
    admin_required,
    current_organization_id,
    current_role,
    json_body,
    manager_required,
    optional_int_arg,
)
from ..container import Container
from ..core.exceptions import ValidationError


def _date_arg(name: str) -> date | None:
    raw = request.args.get(name)
    if not raw:
        return None
    try:
        return parse_iso_date(raw)
    except ValueError as exc:
        raise ValidationError(f"{name} must be a date (YYYY-MM-DD)") from exc


def register(app: Flask, container: Container) -> None:
    @app.route("/api/analytics/staff-costs", methods=["GET"], endpoint="api_staff_costs")
    @manager_required
    def api_staff_costs():
        report = container.staff_cost_service.build_monthly_report(
            current_role=current_role(),
            organization_id=current_organization_id(),
            month=request.args.get("month", ""),
            location_id=optional_int_arg("locationId"),
        )
        return jsonify(report)

    @app.route("/api/analytics/weekly-forecast", methods=["GET"], endpoint="api_weekly_forecast")
    @manager_required
    def api_weekly_forecast():
        forecast = container.forecast_service.build_forecast(
            current_role=current_role(),
            organization_id=current_organization_id(),
            week_start=_date_arg("weekStart"),
            location_id=optional_int_arg("locationId"),
        )
        return jsonify(forecast)

    @app.route("/api/time-entries/export", methods=["GET"], endpoint="api_export_time_entries")
    @manager_required
    def api_export_time_entries():
        export = container.export_service.export(
            current_role=current_role(),
            organization_id=current_organization_id(),
            start_date=_date_arg("startDate"),
            end_date=_date_arg("endDate"),
            location_id=optional_int_arg("locationId"),
            fmt=request.args.get("format", "xlsx"),
        )
        return send_file(
            io.BytesIO(export.content),
            mimetype=export.mimetype,
            as_attachment=True,
            download_name=export.filename,
        )

    @app.route("/api/team/<int:user_id>/rates", methods=["GET"], endpoint="api_user_rates")
    @admin_required
    def api_user_rates(user_id: int):
        rates = container.rate_service.list_rates(
            current_role=current_role(),
            organization_id=current_organization_id(),
            user_id=user_id,
        )
        return jsonify(rates)

    @app.route("/api/team/<int:user_id>/rates", methods=["PUT"], endpoint="api_update_user_rates")
    @admin_required
    def api_update_user_rates(user_id: int):
        data = json_body()
        rates = container.rate_service.update_rates(
            current_role=current_role(),
            organization_id=current_organization_id(),
            user_id=user_id,
            rates=data.get("rates"),
        )
        return jsonify(rates)
