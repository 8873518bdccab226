from __future__ import annotations

import logging
from functools import wraps
from typing import Any

from flask import Flask, jsonify, request, session

from ..core.enums import MANAGER_ROLES, Role
from ..core.exceptions import AuthorizationError, ClockInRejected, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session or "organization_id" not in session:
            return jsonify({"error": "Unauthorized"}), 401
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session or "organization_id" not in session:
                return jsonify({"error": "Unauthorized"}), 401
            if session.get("role") not in allowed:
                return jsonify({"error": "Forbidden"}), 403
            return view(*args, **kwargs)

        return wrapper

    return decorator


manager_required = roles_required(*MANAGER_ROLES)
admin_required = roles_required(Role.ADMIN)


def current_user_id() -> int:
    return int(session["user_id"])


def current_organization_id() -> int:
    return int(session["organization_id"])


def current_role() -> Role:
    return Role(session.get("role", Role.EMPLOYEE.value))


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def optional_int_arg(name: str) -> int | None:
    raw = request.args.get(name)
    if raw in (None, ""):
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ValidationError(f"{name} must be an integer") from exc


def register_error_handlers(app: Flask) -> None:
    """Translate domain exceptions into JSON error responses."""

    @app.errorhandler(ClockInRejected)
    def _clock_in_rejected(e: ClockInRejected):
        return jsonify({"error": str(e), "code": e.code}), 400

    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(AuthorizationError)
    def _forbidden(e: AuthorizationError):
        return jsonify({"error": str(e)}), 403

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return jsonify({"error": str(e)}), 404
