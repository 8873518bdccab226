from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import hours_between, parse_iso_datetime
from ..common.money import round_money
from ..common.web import current_organization_id, current_role, json_body, login_required, optional_int_arg
from ..container import Container
from ..core.exceptions import ValidationError
from .resolver import resolve_break_minutes


def register(app: Flask, container: Container) -> None:
    @app.route("/api/break-rules/resolve", methods=["GET"], endpoint="api_resolve_break")
    @login_required
    def api_resolve_break():
        """Preview the unpaid break a shift would get before it is saved."""
        start = parse_iso_datetime(request.args.get("startTime"), "startTime")
        end = parse_iso_datetime(request.args.get("endTime"), "endTime")
        if end <= start:
            raise ValidationError("End time must be after start time")

        rules = container.break_rule_service.rules_for(
            organization_id=current_organization_id(),
            location_id=optional_int_arg("locationId"),
        )
        return jsonify(
            {
                "durationHours": round_money(hours_between(start, end)),
                "breakMinutes": resolve_break_minutes(start, end, rules),
                "rules": [r.to_dict() for r in rules],
            }
        )

    @app.route("/api/settings/break-rules", methods=["PUT"], endpoint="api_update_break_rules")
    @login_required
    def api_update_break_rules():
        data = json_body()
        rules = container.break_rule_service.update_organization_rules(
            current_role=current_role(),
            organization_id=current_organization_id(),
            rules=data.get("breakRules"),
            break_calculation_mode=data.get("breakCalculationMode"),
        )
        settings = container.organizations_repo.get_settings(current_organization_id())
        return jsonify(
            {
                "breakRules": [r.to_dict() for r in rules],
                "breakCalculationMode": settings.break_calculation_mode.value if settings else None,
            }
        )

    @app.route("/api/locations/<int:location_id>/break-rules", methods=["PUT"], endpoint="api_update_location_break_rules")
    @login_required
    def api_update_location_break_rules(location_id: int):
        data = json_body()
        rules = container.break_rule_service.update_location_rules(
            current_role=current_role(),
            organization_id=current_organization_id(),
            location_id=location_id,
            rules=data.get("breakRules"),
        )
        return jsonify({"locationId": location_id, "breakRules": [r.to_dict() for r in rules]})
