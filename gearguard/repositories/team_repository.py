# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: maintenance teams and the team-membership store.
NO business rules here, pure data access.
"""
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

from gearguard.core.database import to_iso, use_connection, utcnow_iso

TEAM_COLS = "id, name, specialization, description, created_at, updated_at"
TEAM_UPDATABLE = ("name", "specialization", "description")

MEMBER_SELECT = """
    SELECT m.id, m.user_id, m.team_id, m.role, m.created_at,
           u.name AS user_name, u.email AS user_email, u.role AS user_role,
           t.name AS team_name, t.specialization AS team_specialization
    FROM team_members m
    JOIN users u ON u.id = m.user_id
    JOIN maintenance_teams t ON t.id = m.team_id
"""


def _team_to_dict(row) -> Dict[str, Any]:
    return {
        "id": str(row["id"]),
        "name": row["name"],
        "specialization": row["specialization"],
        "description": row["description"],
        "created_at": to_iso(row["created_at"]),
        "updated_at": to_iso(row["updated_at"]),
    }


def _member_to_dict(row) -> Dict[str, Any]:
    return {
        "id": str(row["id"]),
        "user_id": row["user_id"],
        "team_id": row["team_id"],
        "role": row["role"],
        "created_at": to_iso(row["created_at"]),
        "user": {
            "id": row["user_id"], "name": row["user_name"],
            "email": row["user_email"], "role": row["user_role"],
        },
        "team": {
            "id": row["team_id"], "name": row["team_name"],
            "specialization": row["team_specialization"],
        },
    }


class TeamRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    def transaction(self):
        return self._engine.begin()

    # ── Membership ─────────────────────────────────────────────────────

    def is_member(self, user_id: str, team_id: str, conn: Optional[Connection] = None) -> bool:
        with use_connection(self._engine, conn) as c:
            row = c.execute(
                text("SELECT 1 FROM team_members WHERE user_id = :uid AND team_id = :tid"),
                {"uid": user_id, "tid": team_id},
            ).first()
        return row is not None

    def get_user_team_ids(self, user_id: str, conn: Optional[Connection] = None) -> List[str]:
        with use_connection(self._engine, conn) as c:
            rows = c.execute(
                text("SELECT team_id FROM team_members WHERE user_id = :uid"),
                {"uid": user_id},
            ).fetchall()
        return [str(r[0]) for r in rows]

    def add_member(self, team_id: str, user_id: str, role: str,
                   conn: Optional[Connection] = None) -> Dict[str, Any]:
        member_id = str(uuid.uuid4())
        with use_connection(self._engine, conn) as c:
            c.execute(
                text("""
                    INSERT INTO team_members (id, user_id, team_id, role, created_at)
                    VALUES (:id, :uid, :tid, :role, :ts)
                """),
                {"id": member_id, "uid": user_id, "tid": team_id, "role": role,
                 "ts": utcnow_iso()},
            )
            row = c.execute(
                text(f"{MEMBER_SELECT} WHERE m.id = :id"), {"id": member_id}
            ).mappings().first()
        return _member_to_dict(row)

    def remove_member(self, team_id: str, user_id: str, conn: Optional[Connection] = None) -> int:
        with use_connection(self._engine, conn) as c:
            result = c.execute(
                text("DELETE FROM team_members WHERE user_id = :uid AND team_id = :tid"),
                {"uid": user_id, "tid": team_id},
            )
        return result.rowcount

    def list_members(self, team_id: str, conn: Optional[Connection] = None) -> List[Dict[str, Any]]:
        with use_connection(self._engine, conn) as c:
            rows = c.execute(
                text(f"{MEMBER_SELECT} WHERE m.team_id = :tid ORDER BY m.role, u.name"),
                {"tid": team_id},
            ).mappings().all()
        return [_member_to_dict(r) for r in rows]

    def list_user_memberships(self, user_id: str) -> List[Dict[str, Any]]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"{MEMBER_SELECT} WHERE m.user_id = :uid ORDER BY t.name"),
                {"uid": user_id},
            ).mappings().all()
        return [_member_to_dict(r) for r in rows]

    # ── Teams: write ───────────────────────────────────────────────────

    def create_team(self, name: str, specialization: str, description: Optional[str],
                    conn: Optional[Connection] = None) -> Dict[str, Any]:
        now = utcnow_iso()
        params = {"id": str(uuid.uuid4()), "name": name, "specialization": specialization,
                  "description": description, "created_at": now, "updated_at": now}
        with use_connection(self._engine, conn) as c:
            c.execute(
                text(f"""
                    INSERT INTO maintenance_teams ({TEAM_COLS})
                    VALUES (:id, :name, :specialization, :description, :created_at, :updated_at)
                """),
                params,
            )
        return dict(params)

    def update_team(self, team_id: str, fields: Dict[str, Any],
                    conn: Optional[Connection] = None) -> None:
        updates = [f"{col} = :{col}" for col in TEAM_UPDATABLE if col in fields]
        params = {col: fields[col] for col in TEAM_UPDATABLE if col in fields}
        updates.append("updated_at = :updated_at")
        params.update({"id": team_id, "updated_at": utcnow_iso()})
        with use_connection(self._engine, conn) as c:
            c.execute(
                text(f"UPDATE maintenance_teams SET {', '.join(updates)} WHERE id = :id"),
                params,
            )

    def delete_team(self, team_id: str, conn: Optional[Connection] = None) -> None:
        """Drop memberships and detach equipment/requests before removing the team."""
        with use_connection(self._engine, conn) as c:
            params = {"tid": team_id}
            c.execute(text("DELETE FROM team_members WHERE team_id = :tid"), params)
            c.execute(
                text("UPDATE equipment SET maintenance_team_id = NULL WHERE maintenance_team_id = :tid"),
                params,
            )
            c.execute(
                text("UPDATE maintenance_requests SET team_id = NULL WHERE team_id = :tid"),
                params,
            )
            c.execute(text("DELETE FROM maintenance_teams WHERE id = :tid"), params)

    # ── Teams: read ────────────────────────────────────────────────────

    def get_team(self, team_id: str, conn: Optional[Connection] = None) -> Optional[Dict[str, Any]]:
        with use_connection(self._engine, conn) as c:
            row = c.execute(
                text(f"SELECT {TEAM_COLS} FROM maintenance_teams WHERE id = :id"),
                {"id": team_id},
            ).mappings().first()
        return _team_to_dict(row) if row else None

    def find_by_name(self, name: str, conn: Optional[Connection] = None) -> Optional[Dict[str, Any]]:
        with use_connection(self._engine, conn) as c:
            row = c.execute(
                text(f"SELECT {TEAM_COLS} FROM maintenance_teams WHERE name = :name"),
                {"name": name},
            ).mappings().first()
        return _team_to_dict(row) if row else None

    def list_teams(self) -> List[Dict[str, Any]]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"""
                    SELECT {TEAM_COLS},
                        (SELECT COUNT(*) FROM equipment e
                         WHERE e.maintenance_team_id = maintenance_teams.id) AS equipment_count,
                        (SELECT COUNT(*) FROM maintenance_requests r
                         WHERE r.team_id = maintenance_teams.id) AS request_count
                    FROM maintenance_teams ORDER BY name
                """)
            ).mappings().all()
            members = conn.execute(text(f"{MEMBER_SELECT} ORDER BY m.role, u.name")).mappings().all()

        by_team: Dict[str, List[Dict[str, Any]]] = {}
        for m in members:
            by_team.setdefault(m["team_id"], []).append(_member_to_dict(m))

        teams = []
        for row in rows:
            team = _team_to_dict(row)
            team["members"] = by_team.get(team["id"], [])
            team["equipment_count"] = row["equipment_count"] or 0
            team["request_count"] = row["request_count"] or 0
            teams.append(team)
        return teams

    def get_team_detail(self, team_id: str) -> Optional[Dict[str, Any]]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {TEAM_COLS} FROM maintenance_teams WHERE id = :id"),
                {"id": team_id},
            ).mappings().first()
            if not row:
                return None
            team = _team_to_dict(row)

            members = conn.execute(
                text(f"{MEMBER_SELECT} WHERE m.team_id = :tid ORDER BY m.role, u.name"),
                {"tid": team_id},
            ).mappings().all()
            team["members"] = [_member_to_dict(m) for m in members]

            equipment = conn.execute(
                text("""
                    SELECT id, name, serial_number, category, status
                    FROM equipment WHERE maintenance_team_id = :tid ORDER BY name
                """),
                {"tid": team_id},
            ).mappings().all()
            team["equipment"] = [dict(e) for e in equipment]

            requests = conn.execute(
                text("""
                    SELECT id, subject, type, priority, status, equipment_id,
                           assigned_to_id, created_at
                    FROM maintenance_requests WHERE team_id = :tid ORDER BY created_at DESC
                """),
                {"tid": team_id},
            ).mappings().all()
            team["requests"] = [
                {**dict(r), "created_at": to_iso(r["created_at"])} for r in requests
            ]
        team["equipment_count"] = len(team["equipment"])
        team["request_count"] = len(team["requests"])
        return team
