# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: user directory."""
from typing import List, Optional

from fastapi import APIRouter, Depends

from gearguard.core.dependencies import get_team_service, get_user_service
from gearguard.core.security import get_current_user_id
from gearguard.schemas.teams import MemberOut
from gearguard.schemas.users import UserCreate, UserOut
from gearguard.services.team_service import TeamService
from gearguard.services.user_service import UserService

router = APIRouter(prefix="/api/v1", tags=["Users"],
                   dependencies=[Depends(get_current_user_id)])


@router.get("/users", response_model=List[UserOut])
def list_users(role: Optional[str] = None,
               service: UserService = Depends(get_user_service)):
    return [UserOut(**u) for u in service.list_users(role.upper() if role else None)]


@router.post("/users", status_code=201, response_model=UserOut)
def create_user(body: UserCreate, service: UserService = Depends(get_user_service)):
    return UserOut(**service.create_user(body.email, body.name, body.role, body.department))


@router.get("/users/{user_id}", response_model=UserOut)
def get_user(user_id: str, service: UserService = Depends(get_user_service)):
    return UserOut(**service.get_user(user_id))


@router.get("/users/{user_id}/teams", response_model=List[MemberOut])
def get_user_teams(user_id: str, service: TeamService = Depends(get_team_service)):
    return [MemberOut(**m) for m in service.get_user_teams(user_id)]
