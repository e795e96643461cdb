# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Service: user directory. Identity itself is established upstream."""
from typing import Any, Dict, List, Optional

from gearguard.core.errors import ConflictError, NotFoundError
from gearguard.core.logging import get_logger
from gearguard.repositories.user_repository import UserRepository

logger = get_logger(__name__)


class UserService:
    def __init__(self, user_repo: UserRepository) -> None:
        self._users = user_repo

    def list_users(self, role: Optional[str] = None) -> List[Dict[str, Any]]:
        return self._users.list_users(role)

    def get_user(self, user_id: str) -> Dict[str, Any]:
        user = self._users.get_user(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def create_user(self, email: str, name: str, role: str = "USER",
                    department: Optional[str] = None) -> Dict[str, Any]:
        with self._users.transaction() as conn:
            if self._users.email_exists(email, conn=conn):
                raise ConflictError(f"User with email '{email}' already exists")
            user = self._users.create_user(email, name, role, department, conn=conn)
        logger.info("User created id=%s role=%s", user["id"], role)
        return user
