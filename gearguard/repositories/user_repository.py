# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access layer for users."""
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

from gearguard.core.database import to_iso, use_connection, utcnow_iso

USER_COLS = "id, email, name, role, department, created_at, updated_at"


def _row_to_dict(row) -> Dict[str, Any]:
    return {
        "id": str(row["id"]),
        "email": row["email"],
        "name": row["name"],
        "role": row["role"],
        "department": row["department"],
        "created_at": to_iso(row["created_at"]),
        "updated_at": to_iso(row["updated_at"]),
    }


class UserRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    def transaction(self):
        return self._engine.begin()

    def create_user(self, email: str, name: str, role: str,
                    department: Optional[str], conn: Optional[Connection] = None) -> Dict[str, Any]:
        now = utcnow_iso()
        params = {"id": str(uuid.uuid4()), "email": email, "name": name, "role": role,
                  "department": department, "created_at": now, "updated_at": now}
        with use_connection(self._engine, conn) as c:
            c.execute(
                text(f"""
                    INSERT INTO users ({USER_COLS})
                    VALUES (:id, :email, :name, :role, :department, :created_at, :updated_at)
                """),
                params,
            )
        return dict(params)

    def get_user(self, user_id: str, conn: Optional[Connection] = None) -> Optional[Dict[str, Any]]:
        with use_connection(self._engine, conn) as c:
            row = c.execute(
                text(f"SELECT {USER_COLS} FROM users WHERE id = :id"), {"id": user_id}
            ).mappings().first()
        return _row_to_dict(row) if row else None

    def email_exists(self, email: str, conn: Optional[Connection] = None) -> bool:
        with use_connection(self._engine, conn) as c:
            row = c.execute(
                text("SELECT 1 FROM users WHERE email = :email"), {"email": email}
            ).first()
        return row is not None

    def list_users(self, role: Optional[str] = None) -> List[Dict[str, Any]]:
        where = " WHERE role = :role" if role else ""
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"SELECT {USER_COLS} FROM users{where} ORDER BY name"),
                {"role": role} if role else {},
            ).mappings().all()
        return [_row_to_dict(r) for r in rows]
