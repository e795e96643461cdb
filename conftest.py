"""
Shared fixtures: an in-memory SQLite database per test, fresh repositories
and services, and the FastAPI app wired to them through dependency overrides.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from gearguard.core import dependencies
from gearguard.core.database import build_engine, init_schema
from gearguard.repositories import (
    EquipmentRepository,
    RequestRepository,
    TeamRepository,
    UserRepository,
)
from gearguard.services import EquipmentService, RequestService, TeamService, UserService
from main import app


def _wire(engine, strict=False):
    users = UserRepository(engine)
    teams = TeamRepository(engine)
    equipment = EquipmentRepository(engine)
    requests = RequestRepository(engine)
    team_service = TeamService(teams, users)
    equipment_service = EquipmentService(equipment, teams, users)
    return SimpleNamespace(
        engine=engine,
        request_repo=requests,
        users=UserService(users),
        teams=team_service,
        equipment=equipment_service,
        requests=RequestService(requests, team_service, equipment_service, users,
                                strict_transitions=strict),
    )


@pytest.fixture
def engine():
    eng = build_engine("sqlite://")
    init_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def svc(engine):
    return _wire(engine)


@pytest.fixture
def strict_svc(engine):
    return _wire(engine, strict=True)


@pytest.fixture
def world(svc):
    """Two users, one team with a single member, and equipment with and without a team."""
    alice = svc.users.create_user("alice@example.com", "Alice", "TECHNICIAN")
    bob = svc.users.create_user("bob@example.com", "Bob", "TECHNICIAN")
    carol = svc.users.create_user("carol@example.com", "Carol", "MANAGER")
    mechanics = svc.teams.create_team("Mechanics", "Hydraulics")
    svc.teams.add_member(mechanics["id"], alice["id"])
    press = svc.equipment.create_equipment({
        "name": "Hydraulic Press", "serial_number": "HP-001", "category": "MACHINERY",
        "department": "Production", "location": "Hall A",
        "maintenance_team_id": mechanics["id"],
    })
    laptop = svc.equipment.create_equipment({
        "name": "Laptop", "serial_number": "LT-042", "category": "IT_EQUIPMENT",
        "department": "Office", "location": "Floor 2",
    })
    return SimpleNamespace(alice=alice, bob=bob, carol=carol, team=mechanics,
                           press=press, laptop=laptop)


@pytest.fixture
def client(svc):
    app.dependency_overrides[dependencies.get_request_repo] = lambda: svc.request_repo
    app.dependency_overrides[dependencies.get_request_service] = lambda: svc.requests
    app.dependency_overrides[dependencies.get_team_service] = lambda: svc.teams
    app.dependency_overrides[dependencies.get_equipment_service] = lambda: svc.equipment
    app.dependency_overrides[dependencies.get_user_service] = lambda: svc.users
    yield TestClient(app)
    app.dependency_overrides.clear()