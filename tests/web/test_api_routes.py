from datetime import datetime

import pytest
from flask import Flask

from src.shiftwise.shiftwise.container import assemble
from src.shiftwise.shiftwise.core.enums import PaymentType, Role
from src.shiftwise.shiftwise.main import register_routes
from src.shiftwise.shiftwise.payroll.model import StaffMember
from src.shiftwise.shiftwise.shifts.model import Shift, ShiftCategory


@pytest.fixture
def container(organizations, time_entries, make_shifts, make_payroll):
    return assemble(
        organizations_repo=organizations,
        shifts_repo=make_shifts(
            [
                Shift(
                    shift_id=1,
                    organization_id=1,
                    title="Coaching",
                    start_time=datetime(2025, 6, 2, 9, 0),
                    end_time=datetime(2025, 6, 2, 17, 0),
                    assigned_to_id=5,
                )
            ]
        ),
        time_entries_repo=time_entries,
        payroll_repo=make_payroll(
            staff=[StaffMember(5, "Ana", Role.EMPLOYEE, PaymentType.HOURLY)],
            categories=[ShiftCategory(7, 1, "Coaching", 12.0)],
        ),
    )


@pytest.fixture
def client(container):
    app = Flask(__name__)
    app.secret_key = "test"
    app.config["TESTING"] = True
    register_routes(app, container)
    return app.test_client()


def login(client, *, user_id=5, role=Role.EMPLOYEE):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["organization_id"] = 1
        sess["role"] = role.value


def test_requires_session(client):
    resp = client.post("/api/time-entries/clock-in", json={})
    assert resp.status_code == 401


def test_clock_in_rejection_carries_code(client):
    login(client)
    resp = client.post("/api/time-entries/clock-in", json={})

    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Please enable location services to clock in", "code": "LOCATION_REQUIRED"}


def test_clock_in_break_and_clock_out(client):
    login(client)
    resp = client.post("/api/time-entries/clock-in", json={"latitude": 51.5, "longitude": -0.12})
    assert resp.status_code == 201
    entry_id = resp.get_json()["id"]

    resp = client.post("/api/time-entries/break", json={"timeEntryId": entry_id, "action": "start"})
    assert resp.status_code == 200
    assert resp.get_json()["breakStart"] is not None

    resp = client.post("/api/time-entries/clock-out", json={"timeEntryId": entry_id})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "End your break before clocking out"

    client.post("/api/time-entries/break", json={"timeEntryId": entry_id, "action": "end"})
    resp = client.post("/api/time-entries/clock-out", json={"timeEntryId": entry_id})
    assert resp.status_code == 200
    assert resp.get_json()["clockOut"] is not None
    assert "warning" in resp.get_json()


def test_invalid_break_action(client):
    login(client)
    entry_id = client.post("/api/time-entries/clock-in", json={"latitude": 51.5, "longitude": -0.12}).get_json()["id"]
    resp = client.post("/api/time-entries/break", json={"timeEntryId": entry_id, "action": "pause"})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Invalid action"}


def test_explicit_shift_of_someone_else_is_forbidden(client):
    login(client, user_id=6)
    resp = client.post("/api/time-entries/clock-in", json={"shiftId": 1, "latitude": 51.5, "longitude": -0.12})
    assert resp.status_code == 403


def test_resolve_break_preview(client):
    login(client)
    resp = client.get(
        "/api/break-rules/resolve",
        query_string={"startTime": "2025-06-02T09:00:00Z", "endTime": "2025-06-02T15:30:00Z"},
    )
    assert resp.status_code == 200
    assert resp.get_json()["breakMinutes"] == 30
    assert resp.get_json()["durationHours"] == 6.5


def test_create_shift_and_update_rules(client):
    login(client, role=Role.MANAGER)
    resp = client.put("/api/settings/break-rules", json={"breakRules": [{"minHours": 2, "breakMinutes": 10}]})
    assert resp.status_code == 200
    assert resp.get_json()["breakCalculationMode"] == "PER_SHIFT"

    resp = client.post(
        "/api/shifts",
        json={"title": "Kids club", "startTime": "2025-06-03T10:00:00", "endTime": "2025-06-03T13:00:00"},
    )
    assert resp.status_code == 201
    assert resp.get_json()["scheduledBreakMinutes"] == 10

    resp = client.put("/api/locations/99/break-rules", json={"breakRules": []})
    assert resp.status_code == 404


def test_employee_cannot_create_shift(client):
    login(client)
    resp = client.post(
        "/api/shifts",
        json={"title": "Nope", "startTime": "2025-06-03T10:00:00", "endTime": "2025-06-03T13:00:00"},
    )
    assert resp.status_code == 403


def test_analytics_permissions(client):
    login(client)
    assert client.get("/api/analytics/staff-costs?month=2025-05").status_code == 403

    login(client, role=Role.MANAGER)
    resp = client.get("/api/analytics/staff-costs")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Month parameter is required (format: YYYY-MM)"

    resp = client.get("/api/analytics/staff-costs?month=2025-05")
    assert resp.status_code == 200
    assert resp.get_json()["totals"]["totalCost"] == 0

    resp = client.get("/api/analytics/weekly-forecast?weekStart=2025-06-02")
    assert resp.status_code == 200
    assert resp.get_json()["scheduled"]["shiftCount"] == 1


def test_export_download(client):
    login(client, role=Role.MANAGER)
    resp = client.get("/api/time-entries/export?startDate=2025-05-01&endDate=2025-05-31&format=csv")

    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert "timesheet_2025-05-01_to_2025-05-31.csv" in resp.headers["Content-Disposition"]

    resp = client.get("/api/time-entries/export?startDate=2025-05-01")
    assert resp.status_code == 400


def test_team_rates_admin_only(client):
    login(client, role=Role.MANAGER)
    assert client.get("/api/team/5/rates").status_code == 403

    login(client, role=Role.ADMIN)
    resp = client.put("/api/team/5/rates", json={"rates": [{"categoryId": 7, "hourlyRate": 13.5}]})
    assert resp.status_code == 200
    assert resp.get_json()[0]["effectiveRate"] == 13.5


def test_manual_entry_and_review_routes(client):
    login(client, role=Role.MANAGER)
    resp = client.post(
        "/api/time-entries/manual",
        json={"userId": 5, "clockIn": "2025-05-06T09:00:00Z", "clockOut": "2025-05-06T17:00:00Z", "totalBreak": 30},
    )
    assert resp.status_code == 201
    created = resp.get_json()
    assert created["status"] == "APPROVED"
    assert created["totalBreak"] == 30

    resp = client.patch(f"/api/time-entries/{created['id']}", json={"status": "REJECTED", "notes": "Duplicate"})
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "REJECTED"
    assert resp.get_json()["notes"] == "Duplicate"

    resp = client.post(
        "/api/time-entries/manual",
        json={"userId": 20, "clockIn": "2025-05-06T09:00:00Z", "clockOut": "2025-05-06T17:00:00Z"},
    )
    assert resp.status_code == 404

    login(client)
    assert client.patch(f"/api/time-entries/{created['id']}", json={"status": "APPROVED"}).status_code == 403
