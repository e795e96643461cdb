# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Request / Response schemas for the equipment directory."""
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from gearguard.schemas import EQUIPMENT_CATEGORIES, EQUIPMENT_STATUSES, normalise_choice


class EquipmentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    serial_number: str = Field(..., min_length=1, max_length=255)
    category: str
    department: str = Field(..., min_length=1, max_length=255)
    location: str = Field(..., min_length=1, max_length=255)
    purchase_date: Optional[datetime] = None
    warranty_expiry: Optional[datetime] = None
    assigned_to_id: Optional[str] = None
    maintenance_team_id: Optional[str] = None

    @field_validator("category")
    @classmethod
    def normalise_category(cls, v: str) -> str:
        return normalise_choice(v, EQUIPMENT_CATEGORIES, "category")


class EquipmentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[str] = None
    department: Optional[str] = Field(None, min_length=1, max_length=255)
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    warranty_expiry: Optional[datetime] = None
    status: Optional[str] = None
    assigned_to_id: Optional[str] = None
    maintenance_team_id: Optional[str] = None

    @field_validator("category")
    @classmethod
    def normalise_category(cls, v: Optional[str]) -> Optional[str]:
        return normalise_choice(v, EQUIPMENT_CATEGORIES, "category")

    @field_validator("status")
    @classmethod
    def normalise_status(cls, v: Optional[str]) -> Optional[str]:
        return normalise_choice(v, EQUIPMENT_STATUSES, "status")


class EquipmentOut(BaseModel):
    id: str
    name: str
    serial_number: str
    category: str
    department: str
    location: str
    purchase_date: Optional[str]
    warranty_expiry: Optional[str]
    status: str
    assigned_to_id: Optional[str]
    maintenance_team_id: Optional[str]
    created_at: str
    updated_at: str
    maintenance_team: Optional[Dict[str, Any]] = None
    request_count: Optional[int] = None
