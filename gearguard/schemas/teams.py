# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Request / Response schemas for teams and memberships."""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from gearguard.schemas import TEAM_ROLES, normalise_choice


class TeamCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    specialization: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)


class TeamUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    specialization: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)


class MemberAdd(BaseModel):
    user_id: str = Field(..., min_length=1)
    role: str = "MEMBER"

    @field_validator("role")
    @classmethod
    def normalise_role(cls, v: str) -> str:
        return normalise_choice(v, TEAM_ROLES, "role")


class MemberOut(BaseModel):
    id: str
    user_id: str
    team_id: str
    role: str
    created_at: str
    user: Optional[Dict[str, Any]] = None
    team: Optional[Dict[str, Any]] = None


class TeamOut(BaseModel):
    id: str
    name: str
    specialization: str
    description: Optional[str]
    created_at: str
    updated_at: str
    members: List[MemberOut] = []
    equipment_count: int = 0
    request_count: int = 0


class TeamDetail(TeamOut):
    equipment: List[Dict[str, Any]] = []
    requests: List[Dict[str, Any]] = []
