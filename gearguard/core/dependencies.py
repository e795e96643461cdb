# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""FastAPI dependency injection wiring."""
from gearguard.core.database import engine
from gearguard.repositories import (
    EquipmentRepository,
    RequestRepository,
    TeamRepository,
    UserRepository,
)
from gearguard.services import EquipmentService, RequestService, TeamService, UserService

_user_repo = UserRepository(engine)
_team_repo = TeamRepository(engine)
_equipment_repo = EquipmentRepository(engine)
_request_repo = RequestRepository(engine)

_user_service = UserService(_user_repo)
_team_service = TeamService(_team_repo, _user_repo)
_equipment_service = EquipmentService(_equipment_repo, _team_repo, _user_repo)
_request_service = RequestService(_request_repo, _team_service, _equipment_service, _user_repo)


def get_request_repo() -> RequestRepository:
    return _request_repo


def get_request_service() -> RequestService:
    return _request_service


def get_team_service() -> TeamService:
    return _team_service


def get_equipment_service() -> EquipmentService:
    return _equipment_service


def get_user_service() -> UserService:
    return _user_service
