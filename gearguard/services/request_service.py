# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Business logic for the maintenance-request lifecycle.

Status workflow:
    NEW ─► IN_PROGRESS ─► REPAIRED
    NEW ─► IN_PROGRESS ─► SCRAP

Moving a team-owned request to IN_PROGRESS requires the caller to be a
member of that team; assignment requires the assignee to be one. Reaching
SCRAP marks the linked equipment SCRAPPED, and reaching REPAIRED stamps the
completion date and the reported duration. Every check and the writes that
depend on it share one database transaction.

By default any status may be written from any other status. With strict
transitions enabled the graph in ``ALLOWED_TRANSITIONS`` is enforced and the
terminal states are immutable.
"""
from typing import Any, Dict, List, Optional

from gearguard.core.config import settings
from gearguard.core.database import utcnow_iso
from gearguard.core.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from gearguard.core.logging import get_logger
from gearguard.metrics import (
    MAINTENANCE_REQUESTS_CREATED,
    MAINTENANCE_REQUESTS_TOTAL,
    MEMBERSHIP_DENIALS,
    REPAIR_DURATION_HOURS,
    STATUS_TRANSITIONS,
)
from gearguard.repositories.request_repository import RequestRepository
from gearguard.repositories.user_repository import UserRepository
from gearguard.schemas import ALLOWED_TRANSITIONS, REQUEST_STATUSES, TERMINAL_STATUSES
from gearguard.services.equipment_service import EquipmentService
from gearguard.services.team_service import TeamService

logger = get_logger(__name__)

IN_PROGRESS_DENIED = "Only team members can work on this request"
ASSIGNEE_DENIED = "Assignee must be a member of the maintenance team"

# Status, assignment, completion, equipment and creator have dedicated paths.
EDITABLE_FIELDS = ("subject", "description", "type", "priority", "scheduled_date", "team_id")
CLEARABLE_FIELDS = ("scheduled_date", "team_id")


class RequestService:
    def __init__(self, request_repo: RequestRepository, team_service: TeamService,
                 equipment_service: EquipmentService, user_repo: UserRepository,
                 strict_transitions: Optional[bool] = None):
        self._requests = request_repo
        self._teams = team_service
        self._equipment = equipment_service
        self._users = user_repo
        self._strict = (settings.STRICT_STATUS_TRANSITIONS
                        if strict_transitions is None else strict_transitions)

    def seed_gauges(self):
        for status in REQUEST_STATUSES:
            MAINTENANCE_REQUESTS_TOTAL.labels(status=status).set(self._requests.count_by_status(status))
        logger.info("Prometheus gauges loaded from DB")

    # ── Commands ──

    def create_request(self, fields: Dict[str, Any], created_by_id: str) -> Dict[str, Any]:
        equipment_id = fields.get("equipment_id")
        if not equipment_id:
            raise BadRequestError("equipment_id is required")

        data = dict(fields, created_by_id=created_by_id)
        with self._requests.transaction() as conn:
            if self._users.get_user(created_by_id, conn=conn) is None:
                raise NotFoundError(f"User {created_by_id} not found")
            exists, maintenance_team_id = self._equipment.get_maintenance_team_id(
                equipment_id, conn=conn)
            if not exists:
                raise NotFoundError(f"Equipment {equipment_id} not found")
            if data.get("team_id"):
                if not self._teams.team_exists(data["team_id"], conn=conn):
                    raise NotFoundError(f"Team {data['team_id']} not found")
            elif maintenance_team_id:
                data["team_id"] = maintenance_team_id

            request_id = self._requests.create_request(data, conn=conn)
            result = self._requests.get_request(request_id, conn=conn)

        MAINTENANCE_REQUESTS_CREATED.labels(type=result["type"], priority=result["priority"]).inc()
        MAINTENANCE_REQUESTS_TOTAL.labels(status="NEW").inc()
        logger.info("Request created id=%s equipment=%s team=%s by=%s",
                    request_id, equipment_id, result["team_id"], created_by_id)
        return result

    def update_request(self, request_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Generic field update; status and assignment go through their own commands."""
        fields = {
            k: v for k, v in fields.items()
            if k in EDITABLE_FIELDS and (v is not None or k in CLEARABLE_FIELDS)
        }
        with self._requests.transaction() as conn:
            if self._requests.get_request_state(request_id, conn=conn) is None:
                raise NotFoundError("Request not found")
            team_id = fields.get("team_id")
            if team_id and not self._teams.team_exists(team_id, conn=conn):
                raise NotFoundError(f"Team {team_id} not found")
            self._requests.update_request(request_id, fields, conn=conn)
            return self._requests.get_request(request_id, conn=conn)

    def update_request_status(self, request_id: str, status: str,
                              user_id: Optional[str] = None,
                              duration: Optional[float] = None) -> Dict[str, Any]:
        with self._requests.transaction() as conn:
            current = self._requests.get_request_state(request_id, conn=conn)
            if current is None:
                raise NotFoundError("Request not found")

            team_id = current["team_id"]
            if status == "IN_PROGRESS" and team_id and user_id:
                if not self._teams.is_user_team_member(user_id, team_id, conn=conn):
                    MEMBERSHIP_DENIALS.labels(operation="status").inc()
                    logger.warning("Status change denied request=%s user=%s team=%s",
                                   request_id, user_id, team_id,
                                   extra={"user_id": user_id})
                    raise ForbiddenError(IN_PROGRESS_DENIED)

            self._check_transition(current["status"], status)

            updates: Dict[str, Any] = {"status": status}
            if status == "REPAIRED":
                updates["completed_date"] = utcnow_iso()
                if duration is not None:
                    updates["duration"] = duration
            if status == "SCRAP":
                self._equipment.mark_scrapped(current["equipment_id"], conn=conn)

            self._requests.update_request(request_id, updates, conn=conn)
            result = self._requests.get_request(request_id, conn=conn)

        self._record_transition(request_id, current["status"], status)
        if status == "REPAIRED" and duration is not None:
            REPAIR_DURATION_HOURS.observe(duration)
        return result

    def assign_request(self, request_id: str, assigned_to_id: str) -> Dict[str, Any]:
        if not assigned_to_id:
            raise BadRequestError("assigned_to_id is required")

        with self._requests.transaction() as conn:
            current = self._requests.get_request_state(request_id, conn=conn)
            if current is None:
                raise NotFoundError("Request not found")
            if self._users.get_user(assigned_to_id, conn=conn) is None:
                raise NotFoundError(f"User {assigned_to_id} not found")

            team_id = current["team_id"]
            if team_id and not self._teams.is_user_team_member(assigned_to_id, team_id, conn=conn):
                MEMBERSHIP_DENIALS.labels(operation="assign").inc()
                logger.warning("Assignment denied request=%s assignee=%s team=%s",
                               request_id, assigned_to_id, team_id)
                raise ForbiddenError(ASSIGNEE_DENIED)

            self._check_transition(current["status"], "IN_PROGRESS")
            self._requests.update_request(
                request_id, {"assigned_to_id": assigned_to_id, "status": "IN_PROGRESS"}, conn=conn)
            result = self._requests.get_request(request_id, conn=conn)

        logger.info("Request assigned id=%s assignee=%s", request_id, assigned_to_id)
        self._record_transition(request_id, current["status"], "IN_PROGRESS")
        return result

    # ── Queries ──

    def get_request(self, request_id: str) -> Dict[str, Any]:
        request = self._requests.get_request(request_id)
        if request is None:
            raise NotFoundError("Request not found")
        return request

    def list_requests(self, type_: Optional[str] = None, status: Optional[str] = None,
                      priority: Optional[str] = None, team_id: Optional[str] = None,
                      search: Optional[str] = None) -> List[Dict[str, Any]]:
        return self._requests.list_requests(type_, status, priority, team_id, search)

    def get_requests_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        team_ids = self._teams.get_user_team_ids(user_id)
        return self._requests.list_visible_to_teams(team_ids)

    def get_calendar_requests(self) -> List[Dict[str, Any]]:
        return self._requests.list_calendar()

    def get_kanban_requests(self) -> List[Dict[str, Any]]:
        return self._requests.list_kanban()

    def get_summary_stats(self) -> Dict[str, Any]:
        stats = self._requests.get_summary_stats()
        stats["by_status"] = {s: stats["by_status"].get(s, 0) for s in REQUEST_STATUSES}
        return stats

    # ── Private ──

    def _check_transition(self, current: str, target: str) -> None:
        if not self._strict:
            return
        if current == target and current not in TERMINAL_STATUSES:
            return
        allowed = ALLOWED_TRANSITIONS.get(current, set())
        if target not in allowed:
            raise ConflictError(
                f"Cannot transition from '{current}' to '{target}'. "
                f"Allowed: {sorted(allowed) if allowed else 'none (terminal state)'}"
            )

    def _record_transition(self, request_id: str, old_status: str, new_status: str) -> None:
        STATUS_TRANSITIONS.labels(from_status=old_status, to_status=new_status).inc()
        if old_status != new_status:
            MAINTENANCE_REQUESTS_TOTAL.labels(status=old_status).dec()
            MAINTENANCE_REQUESTS_TOTAL.labels(status=new_status).inc()
        logger.info("Request %s status %s -> %s", request_id, old_status, new_status)
