# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: equipment directory and the equipment status mirror.
"""
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.engine import Connection

from gearguard.core.errors import ConflictError, NotFoundError
from gearguard.core.logging import get_logger
from gearguard.metrics import EQUIPMENT_SCRAPPED
from gearguard.repositories.equipment_repository import EquipmentRepository
from gearguard.repositories.team_repository import TeamRepository
from gearguard.repositories.user_repository import UserRepository
from gearguard.schemas import EQUIPMENT_STATUS_LOCKS

logger = get_logger(__name__)

CLEARABLE_FIELDS = ("warranty_expiry", "assigned_to_id", "maintenance_team_id")
RETIRED_STATUSES = ("SCRAPPED", "DECOMMISSIONED")


def check_status_change(current: str, target: str) -> None:
    """Reject status writes that would revive a scrapped asset."""
    allowed = EQUIPMENT_STATUS_LOCKS.get(current)
    if allowed is not None and target not in allowed:
        raise ConflictError(
            f"Equipment status cannot change from '{current}' to '{target}'. "
            f"Allowed: {sorted(allowed)}"
        )


class EquipmentService:
    def __init__(self, equipment_repo: EquipmentRepository, team_repo: TeamRepository,
                 user_repo: UserRepository) -> None:
        self._equipment = equipment_repo
        self._teams = team_repo
        self._users = user_repo

    def list_equipment(self, category: Optional[str] = None, status: Optional[str] = None,
                       department: Optional[str] = None,
                       search: Optional[str] = None) -> List[Dict[str, Any]]:
        return self._equipment.list_equipment(category, status, department, search)

    def get_equipment(self, equipment_id: str) -> Dict[str, Any]:
        equipment = self._equipment.get_equipment(equipment_id)
        if equipment is None:
            raise NotFoundError(f"Equipment {equipment_id} not found")
        equipment["request_count"] = self._equipment.count_open_requests(equipment_id)
        return equipment

    def create_equipment(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        with self._equipment.transaction() as conn:
            if self._equipment.serial_exists(fields["serial_number"], conn=conn):
                raise ConflictError(
                    f"Equipment with serial number '{fields['serial_number']}' already exists"
                )
            self._check_references(fields, conn)
            equipment = self._equipment.create_equipment(fields, conn=conn)
        logger.info("Equipment created id=%s serial=%s team=%s",
                    equipment["id"], equipment["serial_number"],
                    equipment["maintenance_team_id"])
        return equipment

    def update_equipment(self, equipment_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        fields = {k: v for k, v in fields.items() if v is not None or k in CLEARABLE_FIELDS}
        with self._equipment.transaction() as conn:
            current = self._equipment.get_equipment(equipment_id, conn=conn)
            if current is None:
                raise NotFoundError(f"Equipment {equipment_id} not found")
            if fields.get("status"):
                check_status_change(current["status"], fields["status"])
            self._check_references(fields, conn)
            self._equipment.update_equipment(equipment_id, fields, conn=conn)
        return self.get_equipment(equipment_id)

    def get_maintenance_team_id(self, equipment_id: str,
                                conn: Optional[Connection] = None) -> Tuple[bool, Optional[str]]:
        return self._equipment.get_maintenance_team_id(equipment_id, conn=conn)

    def mark_scrapped(self, equipment_id: str, conn: Optional[Connection] = None) -> bool:
        """Status-mirror side effect of a request reaching SCRAP.

        Equipment already SCRAPPED or DECOMMISSIONED keeps its status;
        returns whether the row was written.
        """
        current = self._equipment.get_equipment(equipment_id, conn=conn)
        if current is None or current["status"] in RETIRED_STATUSES:
            logger.info("Equipment %s left as %s", equipment_id,
                        current["status"] if current else "missing")
            return False
        self._equipment.set_status(equipment_id, "SCRAPPED", conn=conn)
        EQUIPMENT_SCRAPPED.inc()
        logger.info("Equipment marked SCRAPPED id=%s", equipment_id)
        return True

    def _check_references(self, fields: Dict[str, Any], conn: Connection) -> None:
        team_id = fields.get("maintenance_team_id")
        if team_id and self._teams.get_team(team_id, conn=conn) is None:
            raise NotFoundError(f"Team {team_id} not found")
        user_id = fields.get("assigned_to_id")
        if user_id and self._users.get_user(user_id, conn=conn) is None:
            raise NotFoundError(f"User {user_id} not found")
