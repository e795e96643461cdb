# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Core configuration: all env-driven, zero hardcode.
Single source of truth for every tunable parameter.
"""

import os


class Settings:
    """Application settings loaded from environment variables."""

    SERVICE_NAME: str = os.getenv("SERVICE_NAME", "gearguard-api")
    SERVICE_VERSION: str = os.getenv("SERVICE_VERSION", "1.0.0")

    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./gearguard.db")
    POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "10"))
    MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "5"))
    POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", "300"))
    ISOLATION_LEVEL: str = os.getenv("DB_ISOLATION_LEVEL", "SERIALIZABLE")
    AUTO_CREATE_SCHEMA: bool = (
        os.getenv("AUTO_CREATE_SCHEMA", "true").lower() == "true"
    )

    STRICT_STATUS_TRANSITIONS: bool = (
        os.getenv("STRICT_STATUS_TRANSITIONS", "false").lower() == "true"
    )
    USER_ID_HEADER: str = os.getenv("USER_ID_HEADER", "X-User-ID")

    CORS_ORIGINS: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
