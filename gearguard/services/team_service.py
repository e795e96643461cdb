# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: maintenance teams and membership.
The membership predicate here is the single authorization primitive used by
the request workflow.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy.engine import Connection

from gearguard.core.errors import ConflictError, NotFoundError
from gearguard.core.logging import get_logger
from gearguard.repositories.team_repository import TeamRepository
from gearguard.repositories.user_repository import UserRepository

logger = get_logger(__name__)


class TeamService:
    """Business logic for team CRUD and the team-membership store."""

    def __init__(self, team_repo: TeamRepository, user_repo: UserRepository) -> None:
        self._teams = team_repo
        self._users = user_repo

    # ── Membership queries ──

    def is_user_team_member(self, user_id: str, team_id: str,
                            conn: Optional[Connection] = None) -> bool:
        return self._teams.is_member(user_id, team_id, conn=conn)

    def team_exists(self, team_id: str, conn: Optional[Connection] = None) -> bool:
        return self._teams.get_team(team_id, conn=conn) is not None

    def get_user_team_ids(self, user_id: str,
                          conn: Optional[Connection] = None) -> List[str]:
        return self._teams.get_user_team_ids(user_id, conn=conn)

    def get_user_teams(self, user_id: str) -> List[Dict[str, Any]]:
        if self._users.get_user(user_id) is None:
            raise NotFoundError(f"User {user_id} not found")
        return self._teams.list_user_memberships(user_id)

    def get_team_members_for_assignment(self, team_id: str) -> List[Dict[str, Any]]:
        if self._teams.get_team(team_id) is None:
            raise NotFoundError(f"Team {team_id} not found")
        return self._teams.list_members(team_id)

    # ── Membership changes ──

    def add_member(self, team_id: str, user_id: str, role: str = "MEMBER") -> Dict[str, Any]:
        with self._teams.transaction() as conn:
            if self._teams.get_team(team_id, conn=conn) is None:
                raise NotFoundError(f"Team {team_id} not found")
            if self._users.get_user(user_id, conn=conn) is None:
                raise NotFoundError(f"User {user_id} not found")
            if self._teams.is_member(user_id, team_id, conn=conn):
                raise ConflictError(f"User {user_id} is already a member of team {team_id}")
            member = self._teams.add_member(team_id, user_id, role, conn=conn)
        logger.info("Member added team=%s user=%s role=%s", team_id, user_id, role)
        return member

    def remove_member(self, team_id: str, user_id: str) -> Dict[str, Any]:
        removed = self._teams.remove_member(team_id, user_id)
        if not removed:
            raise NotFoundError(f"User {user_id} is not a member of team {team_id}")
        logger.info("Member removed team=%s user=%s", team_id, user_id)
        return {"status": "removed", "team_id": team_id, "user_id": user_id}

    # ── Team CRUD ──

    def list_teams(self) -> List[Dict[str, Any]]:
        return self._teams.list_teams()

    def get_team(self, team_id: str) -> Dict[str, Any]:
        team = self._teams.get_team_detail(team_id)
        if team is None:
            raise NotFoundError(f"Team {team_id} not found")
        return team

    def create_team(self, name: str, specialization: str,
                    description: Optional[str] = None) -> Dict[str, Any]:
        with self._teams.transaction() as conn:
            if self._teams.find_by_name(name, conn=conn) is not None:
                raise ConflictError(f"Team '{name}' already exists")
            team = self._teams.create_team(name, specialization, description, conn=conn)
        logger.info("Team created id=%s name=%s", team["id"], name)
        team.update({"members": [], "equipment_count": 0, "request_count": 0})
        return team

    def update_team(self, team_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        with self._teams.transaction() as conn:
            if self._teams.get_team(team_id, conn=conn) is None:
                raise NotFoundError(f"Team {team_id} not found")
            if "name" in fields:
                existing = self._teams.find_by_name(fields["name"], conn=conn)
                if existing is not None and existing["id"] != team_id:
                    raise ConflictError(f"Team '{fields['name']}' already exists")
            self._teams.update_team(team_id, fields, conn=conn)
        return self.get_team(team_id)

    def delete_team(self, team_id: str) -> Dict[str, Any]:
        with self._teams.transaction() as conn:
            if self._teams.get_team(team_id, conn=conn) is None:
                raise NotFoundError(f"Team {team_id} not found")
            self._teams.delete_team(team_id, conn=conn)
        logger.info("Team deleted id=%s", team_id)
        return {"status": "deleted", "id": team_id}
