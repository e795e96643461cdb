# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
from gearguard.services.equipment_service import EquipmentService
from gearguard.services.request_service import RequestService
from gearguard.services.team_service import TeamService
from gearguard.services.user_service import UserService

__all__ = ["EquipmentService", "RequestService", "TeamService", "UserService"]
