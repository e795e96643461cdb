# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: maintenance requests, lifecycle commands and read projections."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from gearguard.core.dependencies import get_request_service
from gearguard.core.errors import BadRequestError
from gearguard.core.security import get_current_user_id
from gearguard.schemas.requests import (
    AssignRequest, CalendarEntry, KanbanCard, RequestCreate, RequestOut,
    RequestSummary, RequestUpdate, StatusUpdate,
)
from gearguard.services.request_service import RequestService

router = APIRouter(prefix="/api/v1", tags=["Requests"],
                   dependencies=[Depends(get_current_user_id)])


@router.post("/requests", status_code=201, response_model=RequestOut)
def create_request(body: RequestCreate,
                   user_id: str = Depends(get_current_user_id),
                   service: RequestService = Depends(get_request_service)):
    result = service.create_request(body.model_dump(mode="json"), created_by_id=user_id)
    return RequestOut(**result)


@router.get("/requests", response_model=List[RequestOut])
def list_requests(
    type_filter: Optional[str] = Query(default=None, alias="type"),
    status: Optional[str] = None,
    priority: Optional[str] = None,
    team_id: Optional[str] = None,
    search: Optional[str] = None,
    service: RequestService = Depends(get_request_service),
):
    requests = service.list_requests(type_filter, status, priority, team_id, search)
    return [RequestOut(**r) for r in requests]


@router.get("/requests/my-requests", response_model=List[RequestOut])
def list_my_requests(user_id: str = Depends(get_current_user_id),
                     service: RequestService = Depends(get_request_service)):
    return [RequestOut(**r) for r in service.get_requests_for_user(user_id)]


@router.get("/requests/calendar", response_model=List[CalendarEntry])
def get_calendar(service: RequestService = Depends(get_request_service)):
    return [CalendarEntry(**r) for r in service.get_calendar_requests()]


@router.get("/requests/kanban", response_model=List[KanbanCard])
def get_kanban(service: RequestService = Depends(get_request_service)):
    return [KanbanCard(**r) for r in service.get_kanban_requests()]


@router.get("/requests/stats/summary", response_model=RequestSummary)
def get_summary_stats(service: RequestService = Depends(get_request_service)):
    return RequestSummary(**service.get_summary_stats())


@router.get("/requests/{request_id}", response_model=RequestOut)
def get_request(request_id: str, service: RequestService = Depends(get_request_service)):
    return RequestOut(**service.get_request(request_id))


@router.patch("/requests/{request_id}", response_model=RequestOut)
def update_request(request_id: str, body: RequestUpdate,
                   service: RequestService = Depends(get_request_service)):
    fields = body.model_dump(mode="json", exclude_unset=True)
    return RequestOut(**service.update_request(request_id, fields))


@router.patch("/requests/{request_id}/status", response_model=RequestOut)
def update_request_status(request_id: str, body: StatusUpdate,
                          user_id: str = Depends(get_current_user_id),
                          service: RequestService = Depends(get_request_service)):
    result = service.update_request_status(
        request_id, body.status, user_id=user_id, duration=body.duration,
    )
    return RequestOut(**result)


@router.patch("/requests/{request_id}/assign", response_model=RequestOut)
def assign_request(request_id: str, body: AssignRequest,
                   service: RequestService = Depends(get_request_service)):
    if not body.assigned_to_id:
        raise BadRequestError("assigned_to_id is required")
    return RequestOut(**service.assign_request(request_id, body.assigned_to_id))
