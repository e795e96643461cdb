# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""SQLAlchemy engine singleton, schema bootstrap and connection helpers."""
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

from sqlalchemy import create_engine, make_url, text
from sqlalchemy.engine import URL, Connection, Engine
from sqlalchemy.pool import StaticPool

from gearguard.core.config import settings
from gearguard.core.logging import get_logger

logger = get_logger(__name__)

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id          VARCHAR(36) PRIMARY KEY,
        email       VARCHAR(255) NOT NULL UNIQUE,
        name        VARCHAR(255) NOT NULL,
        role        VARCHAR(32) NOT NULL DEFAULT 'USER',
        department  VARCHAR(255),
        created_at  TIMESTAMPTZ NOT NULL,
        updated_at  TIMESTAMPTZ NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS maintenance_teams (
        id              VARCHAR(36) PRIMARY KEY,
        name            VARCHAR(255) NOT NULL UNIQUE,
        specialization  VARCHAR(255) NOT NULL,
        description     TEXT,
        created_at      TIMESTAMPTZ NOT NULL,
        updated_at      TIMESTAMPTZ NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS team_members (
        id          VARCHAR(36) PRIMARY KEY,
        user_id     VARCHAR(36) NOT NULL REFERENCES users(id),
        team_id     VARCHAR(36) NOT NULL REFERENCES maintenance_teams(id),
        role        VARCHAR(16) NOT NULL DEFAULT 'MEMBER',
        created_at  TIMESTAMPTZ NOT NULL,
        CONSTRAINT uq_team_members_user_team UNIQUE (user_id, team_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS equipment (
        id                   VARCHAR(36) PRIMARY KEY,
        name                 VARCHAR(255) NOT NULL,
        serial_number        VARCHAR(255) NOT NULL UNIQUE,
        category             VARCHAR(32) NOT NULL,
        department           VARCHAR(255) NOT NULL,
        location             VARCHAR(255) NOT NULL,
        purchase_date        TIMESTAMPTZ,
        warranty_expiry      TIMESTAMPTZ,
        status               VARCHAR(32) NOT NULL DEFAULT 'OPERATIONAL',
        assigned_to_id       VARCHAR(36) REFERENCES users(id),
        maintenance_team_id  VARCHAR(36) REFERENCES maintenance_teams(id),
        created_at           TIMESTAMPTZ NOT NULL,
        updated_at           TIMESTAMPTZ NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS maintenance_requests (
        id              VARCHAR(36) PRIMARY KEY,
        subject         VARCHAR(500) NOT NULL,
        description     TEXT NOT NULL,
        type            VARCHAR(16) NOT NULL,
        priority        VARCHAR(16) NOT NULL DEFAULT 'MEDIUM',
        status          VARCHAR(16) NOT NULL DEFAULT 'NEW',
        equipment_id    VARCHAR(36) NOT NULL REFERENCES equipment(id),
        team_id         VARCHAR(36) REFERENCES maintenance_teams(id),
        created_by_id   VARCHAR(36) NOT NULL REFERENCES users(id),
        assigned_to_id  VARCHAR(36) REFERENCES users(id),
        scheduled_date  TIMESTAMPTZ,
        completed_date  TIMESTAMPTZ,
        duration        DOUBLE PRECISION,
        created_at      TIMESTAMPTZ NOT NULL,
        updated_at      TIMESTAMPTZ NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS ix_team_members_user_id ON team_members (user_id)",
    "CREATE INDEX IF NOT EXISTS ix_requests_team_id ON maintenance_requests (team_id)",
    "CREATE INDEX IF NOT EXISTS ix_requests_status ON maintenance_requests (status)",
    "CREATE INDEX IF NOT EXISTS ix_requests_equipment_id ON maintenance_requests (equipment_id)",
)


def _is_memory_sqlite(url: URL) -> bool:
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def build_engine(url: str) -> Engine:
    """Create an engine.

    In-memory SQLite lives inside one connection, so it gets a StaticPool.
    File SQLite keeps the default pool so each transaction owns its connection.
    """
    parsed = make_url(url)
    if _is_memory_sqlite(parsed):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            isolation_level=settings.ISOLATION_LEVEL,
        )
    if parsed.get_backend_name() == "sqlite":
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            isolation_level=settings.ISOLATION_LEVEL,
        )
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=settings.POOL_SIZE,
        max_overflow=settings.MAX_OVERFLOW,
        pool_recycle=settings.POOL_RECYCLE,
        isolation_level=settings.ISOLATION_LEVEL,
    )


def init_schema(target: Engine) -> None:
    with target.begin() as conn:
        for statement in SCHEMA_STATEMENTS:
            conn.execute(text(statement))
    logger.info("Database schema verified (%d statements)", len(SCHEMA_STATEMENTS))


@contextmanager
def use_connection(target: Engine, conn: Optional[Connection] = None) -> Iterator[Connection]:
    """Reuse the caller's transaction when given one, otherwise open a new one."""
    if conn is not None:
        yield conn
        return
    with target.begin() as own:
        yield own


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def to_iso(value: Any) -> Optional[str]:
    """Drivers return datetimes (PostgreSQL) or ISO strings (SQLite)."""
    if value is None:
        return None
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


engine = build_engine(settings.DATABASE_URL)
