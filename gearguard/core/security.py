# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Caller identity: supplied by the upstream identity provider as a header."""
from fastapi import HTTPException, Request

from gearguard.core.config import settings


def get_current_user_id(request: Request) -> str:
    user_id = request.headers.get(settings.USER_ID_HEADER, "").strip()
    if not user_id:
        raise HTTPException(
            status_code=401,
            detail=f"Missing caller identity. Provide {settings.USER_ID_HEADER} header.",
        )
    return user_id
