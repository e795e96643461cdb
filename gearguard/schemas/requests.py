# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Request / Response schemas for maintenance requests.
Used ONLY at the controller (HTTP) boundary.
"""
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from gearguard.schemas import (
    REQUEST_PRIORITIES,
    REQUEST_STATUSES,
    REQUEST_TYPES,
    normalise_choice,
)


class RequestCreate(BaseModel):
    subject: str = Field(..., min_length=1, max_length=500)
    description: str = Field(default="", max_length=5000)
    type: str
    priority: str = "MEDIUM"
    # Presence is checked by the service so a missing value is a 400.
    equipment_id: Optional[str] = None
    team_id: Optional[str] = None
    scheduled_date: Optional[datetime] = None

    @field_validator("type")
    @classmethod
    def normalise_type(cls, v: str) -> str:
        return normalise_choice(v, REQUEST_TYPES, "type")

    @field_validator("priority")
    @classmethod
    def normalise_priority(cls, v: str) -> str:
        return normalise_choice(v, REQUEST_PRIORITIES, "priority")


class RequestUpdate(BaseModel):
    """Generic field update; status and assignment have dedicated endpoints."""
    subject: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = Field(None, max_length=5000)
    type: Optional[str] = None
    priority: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    team_id: Optional[str] = None

    @field_validator("type")
    @classmethod
    def normalise_type(cls, v: Optional[str]) -> Optional[str]:
        return normalise_choice(v, REQUEST_TYPES, "type")

    @field_validator("priority")
    @classmethod
    def normalise_priority(cls, v: Optional[str]) -> Optional[str]:
        return normalise_choice(v, REQUEST_PRIORITIES, "priority")


class StatusUpdate(BaseModel):
    status: str
    duration: Optional[float] = Field(None, ge=0, description="Hours spent on the repair")

    @field_validator("status")
    @classmethod
    def normalise_status(cls, v: str) -> str:
        return normalise_choice(v, REQUEST_STATUSES, "status")


class AssignRequest(BaseModel):
    # Presence is checked by the controller so a missing value is a 400.
    assigned_to_id: Optional[str] = None


class RequestOut(BaseModel):
    id: str
    subject: str
    description: str
    type: str
    priority: str
    status: str
    equipment_id: str
    team_id: Optional[str]
    created_by_id: str
    assigned_to_id: Optional[str]
    scheduled_date: Optional[str]
    completed_date: Optional[str]
    duration: Optional[float]
    created_at: str
    updated_at: str
    equipment: Optional[Dict[str, Any]] = None
    team: Optional[Dict[str, Any]] = None
    created_by: Optional[Dict[str, Any]] = None
    assigned_to: Optional[Dict[str, Any]] = None


class CalendarEntry(BaseModel):
    id: str
    subject: str
    scheduled_date: str
    type: str
    priority: str
    status: str


class KanbanCard(BaseModel):
    id: str
    subject: str
    priority: str
    status: str
    equipment_id: str
    assigned_to_id: Optional[str]
    team_id: Optional[str]
    equipment: Optional[Dict[str, Any]] = None
    team: Optional[Dict[str, Any]] = None


class RequestSummary(BaseModel):
    total: int
    by_status: Dict[str, int]
    avg_repair_duration_hours: Optional[float]
