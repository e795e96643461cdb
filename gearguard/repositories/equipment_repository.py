# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: equipment directory and the equipment status mirror.
NO business rules here, pure data access.
"""
import uuid
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

from gearguard.core.database import to_iso, use_connection, utcnow_iso

EQUIPMENT_COLS = (
    "e.id, e.name, e.serial_number, e.category, e.department, e.location, "
    "e.purchase_date, e.warranty_expiry, e.status, e.assigned_to_id, "
    "e.maintenance_team_id, e.created_at, e.updated_at"
)
EQUIPMENT_UPDATABLE = (
    "name", "category", "department", "location", "warranty_expiry",
    "status", "assigned_to_id", "maintenance_team_id",
)

EQUIPMENT_SELECT = f"""
    SELECT {EQUIPMENT_COLS}, t.name AS team_name
    FROM equipment e
    LEFT JOIN maintenance_teams t ON t.id = e.maintenance_team_id
"""


def _row_to_dict(row) -> Dict[str, Any]:
    team_id = row["maintenance_team_id"]
    return {
        "id": str(row["id"]),
        "name": row["name"],
        "serial_number": row["serial_number"],
        "category": row["category"],
        "department": row["department"],
        "location": row["location"],
        "purchase_date": to_iso(row["purchase_date"]),
        "warranty_expiry": to_iso(row["warranty_expiry"]),
        "status": row["status"],
        "assigned_to_id": row["assigned_to_id"],
        "maintenance_team_id": team_id,
        "created_at": to_iso(row["created_at"]),
        "updated_at": to_iso(row["updated_at"]),
        "maintenance_team": {"id": team_id, "name": row["team_name"]} if team_id else None,
    }


class EquipmentRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    def transaction(self):
        return self._engine.begin()

    # ── Write ──────────────────────────────────────────────────────────

    def create_equipment(self, fields: Dict[str, Any],
                         conn: Optional[Connection] = None) -> Dict[str, Any]:
        equipment_id = str(uuid.uuid4())
        now = utcnow_iso()
        params = {
            "id": equipment_id,
            "name": fields["name"],
            "serial_number": fields["serial_number"],
            "category": fields["category"],
            "department": fields["department"],
            "location": fields["location"],
            "purchase_date": fields.get("purchase_date"),
            "warranty_expiry": fields.get("warranty_expiry"),
            "status": "OPERATIONAL",
            "assigned_to_id": fields.get("assigned_to_id"),
            "maintenance_team_id": fields.get("maintenance_team_id"),
            "created_at": now,
            "updated_at": now,
        }
        with use_connection(self._engine, conn) as c:
            c.execute(
                text("""
                    INSERT INTO equipment
                        (id, name, serial_number, category, department, location,
                         purchase_date, warranty_expiry, status, assigned_to_id,
                         maintenance_team_id, created_at, updated_at)
                    VALUES
                        (:id, :name, :serial_number, :category, :department, :location,
                         :purchase_date, :warranty_expiry, :status, :assigned_to_id,
                         :maintenance_team_id, :created_at, :updated_at)
                """),
                params,
            )
            return self.get_equipment(equipment_id, conn=c)

    def update_equipment(self, equipment_id: str, fields: Dict[str, Any],
                         conn: Optional[Connection] = None) -> None:
        updates = [f"{col} = :{col}" for col in EQUIPMENT_UPDATABLE if col in fields]
        params = {col: fields[col] for col in EQUIPMENT_UPDATABLE if col in fields}
        updates.append("updated_at = :updated_at")
        params.update({"id": equipment_id, "updated_at": utcnow_iso()})
        with use_connection(self._engine, conn) as c:
            c.execute(
                text(f"UPDATE equipment SET {', '.join(updates)} WHERE id = :id"),
                params,
            )

    def set_status(self, equipment_id: str, status: str,
                   conn: Optional[Connection] = None) -> int:
        with use_connection(self._engine, conn) as c:
            result = c.execute(
                text("UPDATE equipment SET status = :status, updated_at = :ts WHERE id = :id"),
                {"status": status, "ts": utcnow_iso(), "id": equipment_id},
            )
        return result.rowcount

    # ── Read ───────────────────────────────────────────────────────────

    def get_equipment(self, equipment_id: str,
                      conn: Optional[Connection] = None) -> Optional[Dict[str, Any]]:
        with use_connection(self._engine, conn) as c:
            row = c.execute(
                text(f"{EQUIPMENT_SELECT} WHERE e.id = :id"), {"id": equipment_id}
            ).mappings().first()
        return _row_to_dict(row) if row else None

    def get_maintenance_team_id(self, equipment_id: str,
                                conn: Optional[Connection] = None) -> Tuple[bool, Optional[str]]:
        """Return (exists, maintenance_team_id) for the auto-fill lookup."""
        with use_connection(self._engine, conn) as c:
            row = c.execute(
                text("SELECT maintenance_team_id FROM equipment WHERE id = :id"),
                {"id": equipment_id},
            ).first()
        if row is None:
            return False, None
        return True, (str(row[0]) if row[0] else None)

    def serial_exists(self, serial_number: str, conn: Optional[Connection] = None) -> bool:
        with use_connection(self._engine, conn) as c:
            row = c.execute(
                text("SELECT 1 FROM equipment WHERE serial_number = :sn"),
                {"sn": serial_number},
            ).first()
        return row is not None

    def count_open_requests(self, equipment_id: str) -> int:
        with self._engine.connect() as conn:
            return conn.execute(
                text("""
                    SELECT COUNT(*) FROM maintenance_requests
                    WHERE equipment_id = :id AND status IN ('NEW', 'IN_PROGRESS')
                """),
                {"id": equipment_id},
            ).scalar() or 0

    def list_equipment(self, category: Optional[str] = None, status: Optional[str] = None,
                       department: Optional[str] = None,
                       search: Optional[str] = None) -> List[Dict[str, Any]]:
        conditions = []
        params: Dict[str, Any] = {}
        if category:
            conditions.append("e.category = :category")
            params["category"] = category.upper()
        if status:
            conditions.append("e.status = :status")
            params["status"] = status.upper()
        if department:
            conditions.append("e.department = :department")
            params["department"] = department
        if search:
            conditions.append("(LOWER(e.name) LIKE :search OR LOWER(e.serial_number) LIKE :search)")
            params["search"] = f"%{search.lower()}%"
        where = (" WHERE " + " AND ".join(conditions)) if conditions else ""

        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"{EQUIPMENT_SELECT}{where} ORDER BY e.name"), params
            ).mappings().all()
        return [_row_to_dict(r) for r in rows]
