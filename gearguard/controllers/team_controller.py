# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: maintenance teams and membership."""
from typing import List

from fastapi import APIRouter, Depends

from gearguard.core.dependencies import get_team_service
from gearguard.core.security import get_current_user_id
from gearguard.schemas.teams import (
    MemberAdd, MemberOut, TeamCreate, TeamDetail, TeamOut, TeamUpdate,
)
from gearguard.services.team_service import TeamService

router = APIRouter(prefix="/api/v1", tags=["Teams"],
                   dependencies=[Depends(get_current_user_id)])


@router.get("/teams", response_model=List[TeamOut])
def list_teams(service: TeamService = Depends(get_team_service)):
    return [TeamOut(**t) for t in service.list_teams()]


@router.post("/teams", status_code=201, response_model=TeamOut)
def create_team(body: TeamCreate, service: TeamService = Depends(get_team_service)):
    return TeamOut(**service.create_team(body.name, body.specialization, body.description))


@router.get("/teams/{team_id}", response_model=TeamDetail)
def get_team(team_id: str, service: TeamService = Depends(get_team_service)):
    return TeamDetail(**service.get_team(team_id))


@router.patch("/teams/{team_id}", response_model=TeamDetail)
def update_team(team_id: str, body: TeamUpdate,
                service: TeamService = Depends(get_team_service)):
    return TeamDetail(**service.update_team(team_id, body.model_dump(exclude_none=True)))


@router.delete("/teams/{team_id}")
def delete_team(team_id: str, service: TeamService = Depends(get_team_service)):
    return service.delete_team(team_id)


@router.get("/teams/{team_id}/members", response_model=List[MemberOut])
def list_members(team_id: str, service: TeamService = Depends(get_team_service)):
    return [MemberOut(**m) for m in service.get_team_members_for_assignment(team_id)]


@router.post("/teams/{team_id}/members", status_code=201, response_model=MemberOut)
def add_member(team_id: str, body: MemberAdd,
               service: TeamService = Depends(get_team_service)):
    return MemberOut(**service.add_member(team_id, body.user_id, body.role))


@router.delete("/teams/{team_id}/members/{user_id}")
def remove_member(team_id: str, user_id: str,
                  service: TeamService = Depends(get_team_service)):
    return service.remove_member(team_id, user_id)
