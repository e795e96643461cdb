# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Repository package: re-exports the data-access classes."""
from gearguard.repositories.equipment_repository import EquipmentRepository
from gearguard.repositories.request_repository import RequestRepository
from gearguard.repositories.team_repository import TeamRepository
from gearguard.repositories.user_repository import UserRepository

__all__ = ["EquipmentRepository", "RequestRepository", "TeamRepository", "UserRepository"]
