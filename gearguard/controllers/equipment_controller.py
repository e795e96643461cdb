# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: equipment directory."""
from typing import List, Optional

from fastapi import APIRouter, Depends

from gearguard.core.dependencies import get_equipment_service
from gearguard.core.security import get_current_user_id
from gearguard.schemas.equipment import EquipmentCreate, EquipmentOut, EquipmentUpdate
from gearguard.services.equipment_service import EquipmentService

router = APIRouter(prefix="/api/v1", tags=["Equipment"],
                   dependencies=[Depends(get_current_user_id)])


@router.get("/equipment", response_model=List[EquipmentOut])
def list_equipment(category: Optional[str] = None, status: Optional[str] = None,
                   department: Optional[str] = None, search: Optional[str] = None,
                   service: EquipmentService = Depends(get_equipment_service)):
    return [EquipmentOut(**e) for e in service.list_equipment(category, status, department, search)]


@router.post("/equipment", status_code=201, response_model=EquipmentOut)
def create_equipment(body: EquipmentCreate,
                     service: EquipmentService = Depends(get_equipment_service)):
    return EquipmentOut(**service.create_equipment(body.model_dump(mode="json")))


@router.get("/equipment/{equipment_id}", response_model=EquipmentOut)
def get_equipment(equipment_id: str,
                  service: EquipmentService = Depends(get_equipment_service)):
    return EquipmentOut(**service.get_equipment(equipment_id))


@router.patch("/equipment/{equipment_id}", response_model=EquipmentOut)
def update_equipment(equipment_id: str, body: EquipmentUpdate,
                     service: EquipmentService = Depends(get_equipment_service)):
    fields = body.model_dump(mode="json", exclude_unset=True)
    return EquipmentOut(**service.update_equipment(equipment_id, fields))
