# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Request / Response schemas for the user directory."""
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from gearguard.schemas import USER_ROLES, normalise_choice


class UserCreate(BaseModel):
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    name: str = Field(..., min_length=1, max_length=255)
    role: str = "USER"
    department: Optional[str] = Field(None, max_length=255)

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("role")
    @classmethod
    def normalise_role(cls, v: str) -> str:
        return normalise_choice(v, USER_ROLES, "role")


class UserOut(BaseModel):
    id: str
    email: str
    name: str
    role: str
    department: Optional[str]
    created_at: str
    updated_at: str
