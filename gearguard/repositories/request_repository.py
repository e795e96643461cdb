# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access layer for maintenance requests and their read projections."""
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import bindparam, text
from sqlalchemy.engine import Connection, Engine

from gearguard.core.database import to_iso, use_connection, utcnow_iso


REQUEST_UPDATABLE = (
    "subject", "description", "type", "priority", "status", "team_id",
    "assigned_to_id", "scheduled_date", "completed_date", "duration",
)

REQUEST_SELECT = """
    SELECT r.id, r.subject, r.description, r.type, r.priority, r.status,
           r.equipment_id, r.team_id, r.created_by_id, r.assigned_to_id,
           r.scheduled_date, r.completed_date, r.duration, r.created_at, r.updated_at,
           e.name AS equipment_name, e.serial_number AS equipment_serial_number,
           e.category AS equipment_category, e.status AS equipment_status,
           e.location AS equipment_location,
           t.name AS team_name, t.specialization AS team_specialization,
           cb.name AS created_by_name, cb.email AS created_by_email,
           au.name AS assigned_to_name, au.email AS assigned_to_email
    FROM maintenance_requests r
    LEFT JOIN equipment e ON e.id = r.equipment_id
    LEFT JOIN maintenance_teams t ON t.id = r.team_id
    LEFT JOIN users cb ON cb.id = r.created_by_id
    LEFT JOIN users au ON au.id = r.assigned_to_id
"""


def _row_to_dict(row) -> Dict[str, Any]:
    request = {
        "id": str(row["id"]),
        "subject": row["subject"],
        "description": row["description"],
        "type": row["type"],
        "priority": row["priority"],
        "status": row["status"],
        "equipment_id": row["equipment_id"],
        "team_id": row["team_id"],
        "created_by_id": row["created_by_id"],
        "assigned_to_id": row["assigned_to_id"],
        "scheduled_date": to_iso(row["scheduled_date"]),
        "completed_date": to_iso(row["completed_date"]),
        "duration": float(row["duration"]) if row["duration"] is not None else None,
        "created_at": to_iso(row["created_at"]),
        "updated_at": to_iso(row["updated_at"]),
        "equipment": None,
        "team": None,
        "created_by": None,
        "assigned_to": None,
    }
    if row["equipment_name"] is not None:
        request["equipment"] = {
            "id": row["equipment_id"], "name": row["equipment_name"],
            "serial_number": row["equipment_serial_number"],
            "category": row["equipment_category"], "status": row["equipment_status"],
            "location": row["equipment_location"],
        }
    if row["team_id"] and row["team_name"] is not None:
        request["team"] = {
            "id": row["team_id"], "name": row["team_name"],
            "specialization": row["team_specialization"],
        }
    if row["created_by_name"] is not None:
        request["created_by"] = {
            "id": row["created_by_id"], "name": row["created_by_name"],
            "email": row["created_by_email"],
        }
    if row["assigned_to_id"] and row["assigned_to_name"] is not None:
        request["assigned_to"] = {
            "id": row["assigned_to_id"], "name": row["assigned_to_name"],
            "email": row["assigned_to_email"],
        }
    return request


class RequestRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    def transaction(self):
        """One unit of work; pass the yielded connection to every repository call."""
        return self._engine.begin()

    # ── Write ──────────────────────────────────────────────────────────

    def create_request(self, fields: Dict[str, Any], conn: Optional[Connection] = None) -> str:
        request_id = str(uuid.uuid4())
        now = utcnow_iso()
        with use_connection(self._engine, conn) as c:
            c.execute(
                text("""
                    INSERT INTO maintenance_requests
                        (id, subject, description, type, priority, status, equipment_id,
                         team_id, created_by_id, assigned_to_id, scheduled_date,
                         completed_date, duration, created_at, updated_at)
                    VALUES
                        (:id, :subject, :description, :type, :priority, 'NEW', :equipment_id,
                         :team_id, :created_by_id, NULL, :scheduled_date,
                         NULL, NULL, :created_at, :updated_at)
                """),
                {
                    "id": request_id,
                    "subject": fields["subject"],
                    "description": fields.get("description") or "",
                    "type": fields["type"],
                    "priority": fields.get("priority") or "MEDIUM",
                    "equipment_id": fields["equipment_id"],
                    "team_id": fields.get("team_id"),
                    "created_by_id": fields["created_by_id"],
                    "scheduled_date": fields.get("scheduled_date"),
                    "created_at": now,
                    "updated_at": now,
                },
            )
        return request_id

    def update_request(self, request_id: str, fields: Dict[str, Any],
                       conn: Optional[Connection] = None) -> int:
        updates = [f"{col} = :{col}" for col in REQUEST_UPDATABLE if col in fields]
        params = {col: fields[col] for col in REQUEST_UPDATABLE if col in fields}
        updates.append("updated_at = :updated_at")
        params.update({"id": request_id, "updated_at": utcnow_iso()})
        with use_connection(self._engine, conn) as c:
            result = c.execute(
                text(f"UPDATE maintenance_requests SET {', '.join(updates)} WHERE id = :id"),
                params,
            )
        return result.rowcount

    # ── Read ───────────────────────────────────────────────────────────

    def get_request(self, request_id: str,
                    conn: Optional[Connection] = None) -> Optional[Dict[str, Any]]:
        with use_connection(self._engine, conn) as c:
            row = c.execute(
                text(f"{REQUEST_SELECT} WHERE r.id = :id"), {"id": request_id}
            ).mappings().first()
        return _row_to_dict(row) if row else None

    def get_request_state(self, request_id: str,
                          conn: Optional[Connection] = None) -> Optional[Dict[str, Any]]:
        """Minimal projection used by the workflow checks."""
        with use_connection(self._engine, conn) as c:
            row = c.execute(
                text("""
                    SELECT id, status, team_id, equipment_id, assigned_to_id
                    FROM maintenance_requests WHERE id = :id
                """),
                {"id": request_id},
            ).mappings().first()
        return dict(row) if row else None

    def list_requests(self, type_: Optional[str] = None, status: Optional[str] = None,
                      priority: Optional[str] = None, team_id: Optional[str] = None,
                      search: Optional[str] = None) -> List[Dict[str, Any]]:
        conditions = []
        params: Dict[str, Any] = {}
        if type_:
            conditions.append("r.type = :type")
            params["type"] = type_.upper()
        if status:
            conditions.append("r.status = :status")
            params["status"] = status.upper()
        if priority:
            conditions.append("r.priority = :priority")
            params["priority"] = priority.upper()
        if team_id:
            conditions.append("r.team_id = :team_id")
            params["team_id"] = team_id
        if search:
            conditions.append("(LOWER(r.subject) LIKE :search OR LOWER(r.description) LIKE :search)")
            params["search"] = f"%{search.lower()}%"
        where = (" WHERE " + " AND ".join(conditions)) if conditions else ""

        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"{REQUEST_SELECT}{where} ORDER BY r.created_at DESC"), params
            ).mappings().all()
        return [_row_to_dict(r) for r in rows]

    def list_visible_to_teams(self, team_ids: List[str]) -> List[Dict[str, Any]]:
        """Team-less requests plus those owned by any of ``team_ids``."""
        if team_ids:
            stmt = text(
                f"{REQUEST_SELECT} WHERE r.team_id IS NULL OR r.team_id IN :team_ids "
                "ORDER BY r.created_at DESC"
            ).bindparams(bindparam("team_ids", expanding=True))
            params: Dict[str, Any] = {"team_ids": list(team_ids)}
        else:
            stmt = text(f"{REQUEST_SELECT} WHERE r.team_id IS NULL ORDER BY r.created_at DESC")
            params = {}
        with self._engine.connect() as conn:
            rows = conn.execute(stmt, params).mappings().all()
        return [_row_to_dict(r) for r in rows]

    def list_calendar(self) -> List[Dict[str, Any]]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                text("""
                    SELECT id, subject, scheduled_date, type, priority, status
                    FROM maintenance_requests
                    WHERE scheduled_date IS NOT NULL
                    ORDER BY scheduled_date
                """)
            ).mappings().all()
        return [{**dict(r), "scheduled_date": to_iso(r["scheduled_date"])} for r in rows]

    def list_kanban(self) -> List[Dict[str, Any]]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                text("""
                    SELECT r.id, r.subject, r.priority, r.status, r.equipment_id,
                           r.assigned_to_id, r.team_id,
                           e.name AS equipment_name, e.category AS equipment_category,
                           t.name AS team_name
                    FROM maintenance_requests r
                    LEFT JOIN equipment e ON e.id = r.equipment_id
                    LEFT JOIN maintenance_teams t ON t.id = r.team_id
                    ORDER BY r.created_at DESC
                """)
            ).mappings().all()
        return [
            {
                "id": r["id"], "subject": r["subject"], "priority": r["priority"],
                "status": r["status"], "equipment_id": r["equipment_id"],
                "assigned_to_id": r["assigned_to_id"], "team_id": r["team_id"],
                "equipment": {"name": r["equipment_name"], "category": r["equipment_category"]},
                "team": {"id": r["team_id"], "name": r["team_name"]} if r["team_id"] else None,
            }
            for r in rows
        ]

    def count_by_status(self, status: str) -> int:
        with self._engine.connect() as conn:
            return conn.execute(
                text("SELECT COUNT(*) FROM maintenance_requests WHERE status = :s"), {"s": status}
            ).scalar() or 0

    def get_summary_stats(self) -> Dict[str, Any]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                text("SELECT status, COUNT(*) FROM maintenance_requests GROUP BY status")
            ).fetchall()
            avg_duration = conn.execute(
                text("""
                    SELECT AVG(duration) FROM maintenance_requests
                    WHERE status = 'REPAIRED' AND duration IS NOT NULL
                """)
            ).scalar()
        by_status = {str(r[0]): int(r[1]) for r in rows}
        return {
            "total": sum(by_status.values()),
            "by_status": by_status,
            "avg_repair_duration_hours": round(float(avg_duration), 2) if avg_duration is not None else None,
        }

    def verify_connection(self):
        with self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))
