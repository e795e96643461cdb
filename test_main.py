"""
GearGuard Maintenance API: HTTP tests
======================================
Run:  pytest test_main.py -v --cov=gearguard --cov-report=term-missing
"""
import json
import logging
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from gearguard.core import dependencies
from gearguard.core.logging import JSONFormatter, RequestContextFilter
from main import app


def _as(user):
    return {"X-User-ID": user["id"]}


def _create(client, world, user=None, **overrides):
    body = {
        "subject": "Oil leak",
        "description": "Cylinder seal leaking",
        "type": "corrective",
        "priority": "high",
        "equipment_id": world.press["id"],
    }
    body.update(overrides)
    return client.post("/api/v1/requests", json=body, headers=_as(user or world.carol))


# ═══════════════════════════════════════════════════════════════════════════
# HEALTH & METRICS
# ═══════════════════════════════════════════════════════════════════════════
class TestHealth:
    def test_health_ok(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"
        assert r.json()["service"] == "gearguard-api"

    def test_readiness_ok(self, client):
        r = client.get("/health/ready")
        assert r.status_code == 200
        assert r.json()["database"] == "connected"

    def test_readiness_fails_when_db_down(self, client):
        broken = MagicMock()
        broken.verify_connection.side_effect = OperationalError("SELECT 1", {}, Exception("boom"))
        app.dependency_overrides[dependencies.get_request_repo] = lambda: broken
        r = client.get("/health/ready")
        assert r.status_code == 503

    def test_metrics_endpoint(self, client):
        r = client.get("/metrics")
        assert r.status_code == 200
        assert "gearguard_http_requests_total" in r.text

    def test_request_id_propagated(self, client):
        r = client.get("/health", headers={"X-Request-ID": "trace-123"})
        assert r.headers["X-Request-ID"] == "trace-123"

    def test_request_id_generated(self, client):
        r = client.get("/health")
        assert r.headers.get("X-Request-ID")


# ═══════════════════════════════════════════════════════════════════════════
# ERROR LOGGING
# ═══════════════════════════════════════════════════════════════════════════
class _RecordList(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def captured():
    """Collect records from the gearguard loggers, which do not propagate."""
    names = ("gearguard", "gearguard.services.request_service")
    handler = _RecordList()
    handler.addFilter(RequestContextFilter())
    for name in names:
        logging.getLogger(name).addHandler(handler)
    yield handler
    for name in names:
        logging.getLogger(name).removeHandler(handler)


class TestErrorLogging:
    def test_unhandled_error_carries_request_id(self, client, world, captured):
        broken = MagicMock()
        broken.list_requests.side_effect = RuntimeError("connection reset")
        app.dependency_overrides[dependencies.get_request_service] = lambda: broken
        r = TestClient(app, raise_server_exceptions=False).get(
            "/api/v1/requests", headers={**_as(world.alice), "X-Request-ID": "trace-500"})
        assert r.status_code == 500
        assert r.json()["error"] == "internal_server_error"
        assert r.json()["request_id"] == "trace-500"

        record = next(rec for rec in captured.records if rec.getMessage() == "Unhandled exception")
        assert record.request_id == "trace-500"
        line = json.loads(JSONFormatter().format(record))
        assert line["request_id"] == "trace-500"
        assert line["error_type"] == "RuntimeError"

    def test_rejection_log_carries_request_id(self, client, world, captured):
        r = client.get("/api/v1/requests/missing",
                       headers={**_as(world.alice), "X-Request-ID": "trace-404"})
        assert r.status_code == 404
        record = next(rec for rec in captured.records if "rejected" in rec.getMessage())
        assert record.request_id == "trace-404"

    def test_service_log_inherits_request_id(self, client, world, captured):
        req_id = _create(client, world).json()["id"]
        r = client.patch(f"/api/v1/requests/{req_id}/status", json={"status": "IN_PROGRESS"},
                         headers={**_as(world.bob), "X-Request-ID": "trace-403"})
        assert r.status_code == 403
        denial = next(rec for rec in captured.records
                      if rec.getMessage().startswith("Status change denied"))
        line = json.loads(JSONFormatter().format(denial))
        assert line["request_id"] == "trace-403"
        assert line["user_id"] == world.bob["id"]


# ═══════════════════════════════════════════════════════════════════════════
# IDENTITY
# ═══════════════════════════════════════════════════════════════════════════
class TestIdentity:
    def test_missing_header_is_401(self, client, world):
        r = client.get("/api/v1/requests")
        assert r.status_code == 401
        assert "X-User-ID" in r.json()["detail"]

    def test_blank_header_is_401(self, client, world):
        r = client.get("/api/v1/teams", headers={"X-User-ID": ""})
        assert r.status_code == 401


# ═══════════════════════════════════════════════════════════════════════════
# REQUEST LIFECYCLE
# ═══════════════════════════════════════════════════════════════════════════
class TestRequestLifecycle:
    def test_create_auto_fills_team(self, client, world):
        r = _create(client, world)
        assert r.status_code == 201
        data = r.json()
        assert data["status"] == "NEW"
        assert data["type"] == "CORRECTIVE"
        assert data["priority"] == "HIGH"
        assert data["team_id"] == world.team["id"]
        assert data["created_by_id"] == world.carol["id"]

    def test_create_missing_equipment_is_400(self, client, world):
        r = client.post("/api/v1/requests", json={"subject": "x", "type": "CORRECTIVE"},
                        headers=_as(world.carol))
        assert r.status_code == 400
        assert r.json()["error"] == "bad_request"

    def test_create_unknown_equipment_is_404(self, client, world):
        r = _create(client, world, equipment_id="nope")
        assert r.status_code == 404
        assert r.json()["error"] == "not_found"

    def test_create_invalid_priority_is_422(self, client, world):
        r = _create(client, world, priority="URGENT")
        assert r.status_code == 422

    def test_full_scenario(self, client, world):
        req_id = _create(client, world).json()["id"]

        r = client.patch(f"/api/v1/requests/{req_id}/status",
                         json={"status": "IN_PROGRESS"}, headers=_as(world.bob))
        assert r.status_code == 403
        assert r.json() == {"error": "forbidden",
                            "detail": "Only team members can work on this request"}

        r = client.patch(f"/api/v1/requests/{req_id}/status",
                         json={"status": "in_progress"}, headers=_as(world.alice))
        assert r.status_code == 200
        assert r.json()["status"] == "IN_PROGRESS"

        r = client.patch(f"/api/v1/requests/{req_id}/status",
                         json={"status": "REPAIRED", "duration": 3.5}, headers=_as(world.alice))
        assert r.status_code == 200
        assert r.json()["duration"] == 3.5
        assert r.json()["completed_date"]

    def test_scrap_updates_equipment(self, client, world):
        req_id = _create(client, world).json()["id"]
        r = client.patch(f"/api/v1/requests/{req_id}/status",
                         json={"status": "SCRAP"}, headers=_as(world.alice))
        assert r.status_code == 200
        eq = client.get(f"/api/v1/equipment/{world.press['id']}", headers=_as(world.alice))
        assert eq.json()["status"] == "SCRAPPED"

        r = client.patch(f"/api/v1/equipment/{world.press['id']}",
                         json={"status": "OPERATIONAL"}, headers=_as(world.alice))
        assert r.status_code == 409
        assert r.json()["error"] == "conflict"

    def test_negative_duration_is_422(self, client, world):
        req_id = _create(client, world).json()["id"]
        r = client.patch(f"/api/v1/requests/{req_id}/status",
                         json={"status": "REPAIRED", "duration": -1}, headers=_as(world.alice))
        assert r.status_code == 422

    def test_status_unknown_request_is_404(self, client, world):
        r = client.patch("/api/v1/requests/missing/status",
                         json={"status": "REPAIRED"}, headers=_as(world.alice))
        assert r.status_code == 404

    def test_assign_member(self, client, world):
        req_id = _create(client, world).json()["id"]
        r = client.patch(f"/api/v1/requests/{req_id}/assign",
                         json={"assigned_to_id": world.alice["id"]}, headers=_as(world.carol))
        assert r.status_code == 200
        assert r.json()["status"] == "IN_PROGRESS"
        assert r.json()["assigned_to"]["email"] == "alice@example.com"

    def test_assign_non_member_is_403(self, client, world):
        req_id = _create(client, world).json()["id"]
        r = client.patch(f"/api/v1/requests/{req_id}/assign",
                         json={"assigned_to_id": world.bob["id"]}, headers=_as(world.carol))
        assert r.status_code == 403
        assert "member of the maintenance team" in r.json()["detail"]

    def test_assign_without_assignee_is_400(self, client, world):
        req_id = _create(client, world).json()["id"]
        r = client.patch(f"/api/v1/requests/{req_id}/assign", json={}, headers=_as(world.carol))
        assert r.status_code == 400
        assert r.json()["error"] == "bad_request"

    def test_generic_update(self, client, world):
        req_id = _create(client, world).json()["id"]
        r = client.patch(f"/api/v1/requests/{req_id}",
                         json={"subject": "Seal replaced", "scheduled_date": "2026-11-03T08:00:00"},
                         headers=_as(world.carol))
        assert r.status_code == 200
        assert r.json()["subject"] == "Seal replaced"
        assert r.json()["scheduled_date"].startswith("2026-11-03T08:00:00")
        assert r.json()["status"] == "NEW"

    def test_get_unknown_request_is_404(self, client, world):
        r = client.get("/api/v1/requests/missing", headers=_as(world.carol))
        assert r.status_code == 404


# ═══════════════════════════════════════════════════════════════════════════
# READ PROJECTIONS
# ═══════════════════════════════════════════════════════════════════════════
class TestProjections:
    def test_my_requests(self, client, world):
        owned = _create(client, world).json()["id"]
        open_ = _create(client, world, equipment_id=world.laptop["id"]).json()["id"]
        mine = client.get("/api/v1/requests/my-requests", headers=_as(world.bob)).json()
        assert [r["id"] for r in mine] == [open_]
        mine = client.get("/api/v1/requests/my-requests", headers=_as(world.alice)).json()
        assert {r["id"] for r in mine} == {owned, open_}

    def test_calendar(self, client, world):
        _create(client, world, scheduled_date="2026-11-05T10:00:00")
        _create(client, world)
        r = client.get("/api/v1/requests/calendar", headers=_as(world.alice))
        assert r.status_code == 200
        assert len(r.json()) == 1

    def test_kanban(self, client, world):
        _create(client, world)
        r = client.get("/api/v1/requests/kanban", headers=_as(world.alice))
        assert r.status_code == 200
        assert r.json()[0]["team"]["name"] == "Mechanics"

    def test_summary(self, client, world):
        _create(client, world)
        r = client.get("/api/v1/requests/stats/summary", headers=_as(world.alice))
        assert r.status_code == 200
        assert r.json()["total"] == 1
        assert r.json()["by_status"]["NEW"] == 1

    def test_list_with_filter(self, client, world):
        _create(client, world, priority="low")
        _create(client, world, priority="critical")
        r = client.get("/api/v1/requests", params={"priority": "critical"}, headers=_as(world.alice))
        assert [x["priority"] for x in r.json()] == ["CRITICAL"]


# ═══════════════════════════════════════════════════════════════════════════
# TEAMS, EQUIPMENT, USERS
# ═══════════════════════════════════════════════════════════════════════════
class TestDirectory:
    def test_team_crud_and_membership(self, client, world):
        h = _as(world.carol)
        r = client.post("/api/v1/teams", json={"name": "HVAC Crew", "specialization": "Cooling"}, headers=h)
        assert r.status_code == 201
        team_id = r.json()["id"]

        r = client.post("/api/v1/teams", json={"name": "HVAC Crew", "specialization": "x"}, headers=h)
        assert r.status_code == 409

        r = client.post(f"/api/v1/teams/{team_id}/members",
                        json={"user_id": world.bob["id"], "role": "lead"}, headers=h)
        assert r.status_code == 201
        assert r.json()["role"] == "LEAD"

        r = client.post(f"/api/v1/teams/{team_id}/members", json={"user_id": world.bob["id"]}, headers=h)
        assert r.status_code == 409

        members = client.get(f"/api/v1/teams/{team_id}/members", headers=h).json()
        assert [m["user"]["name"] for m in members] == ["Bob"]

        r = client.patch(f"/api/v1/teams/{team_id}", json={"description": "Chillers"}, headers=h)
        assert r.json()["description"] == "Chillers"

        r = client.delete(f"/api/v1/teams/{team_id}/members/{world.bob['id']}", headers=h)
        assert r.status_code == 200
        r = client.delete(f"/api/v1/teams/{team_id}/members/{world.bob['id']}", headers=h)
        assert r.status_code == 404

        assert client.delete(f"/api/v1/teams/{team_id}", headers=h).status_code == 200
        assert client.get(f"/api/v1/teams/{team_id}", headers=h).status_code == 404

    def test_team_list_counts(self, client, world):
        _create(client, world)
        teams = client.get("/api/v1/teams", headers=_as(world.alice)).json()
        assert teams[0]["name"] == "Mechanics"
        assert teams[0]["equipment_count"] == 1
        assert teams[0]["request_count"] == 1
        assert len(teams[0]["members"]) == 1

    def test_add_member_unknown_user_is_404(self, client, world):
        r = client.post(f"/api/v1/teams/{world.team['id']}/members",
                        json={"user_id": "ghost"}, headers=_as(world.carol))
        assert r.status_code == 404

    def test_equipment_create_and_list(self, client, world):
        h = _as(world.carol)
        r = client.post("/api/v1/equipment", json={
            "name": "Forklift", "serial_number": "FL-7", "category": "vehicle",
            "department": "Logistics", "location": "Yard",
            "maintenance_team_id": world.team["id"],
        }, headers=h)
        assert r.status_code == 201
        assert r.json()["maintenance_team"]["name"] == "Mechanics"

        r = client.get("/api/v1/equipment", params={"category": "VEHICLE"}, headers=h)
        assert [e["serial_number"] for e in r.json()] == ["FL-7"]

    def test_equipment_duplicate_serial_is_409(self, client, world):
        r = client.post("/api/v1/equipment", json={
            "name": "Clone", "serial_number": "HP-001", "category": "MACHINERY",
            "department": "Production", "location": "Hall A",
        }, headers=_as(world.carol))
        assert r.status_code == 409

    def test_users(self, client, world):
        h = _as(world.carol)
        r = client.post("/api/v1/users", json={"email": "Dan@Example.com", "name": "Dan"}, headers=h)
        assert r.status_code == 201
        assert r.json()["email"] == "dan@example.com"
        assert r.json()["role"] == "USER"

        r = client.post("/api/v1/users", json={"email": "dan@example.com", "name": "Dan"}, headers=h)
        assert r.status_code == 409

        assert client.get("/api/v1/users/ghost", headers=h).status_code == 404
        teams = client.get(f"/api/v1/users/{world.alice['id']}/teams", headers=h).json()
        assert [t["team"]["name"] for t in teams] == ["Mechanics"]
