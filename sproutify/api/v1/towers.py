from typing import List

from fastapi import APIRouter, Depends, HTTPException

from sproutify.api.deps import TowerActor, get_current_teacher, get_tower_actor, get_writable_tower
from sproutify.core.logger import db_logger
from sproutify.models.harvest import Harvest, WasteLog
from sproutify.models.profile import Profile
from sproutify.models.tower import Tower, TowerPhoto, TowerVitals
from sproutify.schemas.planting import PlantingCreate, PlantingOut
from sproutify.schemas.tower import HarvestCreate, PhotoCreate, TowerCreate, TowerOut, VitalsCreate, WasteCreate
from sproutify.services.notebook_manager import NotebookConnectionManager
from sproutify.services.planting_service import PlantingService

router = APIRouter(prefix="/api/v1/towers", tags=["Towers"])

notebook_manager = NotebookConnectionManager()


async def record_activity(model, tower: Tower, data: dict):
    row = await model.create(tower=tower, **data)
    db_logger.log_create(model.__name__, {"id": row.id, "tower_id": tower.id})
    await notebook_manager.broadcast(tower.id, {"type": "sources_changed"})
    return {"id": row.id, "created_at": row.created_at}


@router.post("", response_model=TowerOut)
async def create_tower(data: TowerCreate, current_teacher: Profile = Depends(get_current_teacher)):
    tower = await Tower.create(teacher=current_teacher, **data.model_dump())
    db_logger.log_create("Tower", {"id": tower.id, "name": tower.name, "teacher_id": current_teacher.id})
    return tower


@router.get("", response_model=List[TowerOut])
async def list_towers(current_teacher: Profile = Depends(get_current_teacher)):
    return await Tower.filter(teacher_id=current_teacher.id)


@router.get("/{tower_id}", response_model=TowerOut)
async def get_tower(tower_id: int, current_teacher: Profile = Depends(get_current_teacher)):
    tower = await Tower.get_or_none(id=tower_id)
    if not tower:
        raise HTTPException(status_code=404, detail="Tower not found")
    if not current_teacher.can_manage_tower(tower):
        raise HTTPException(status_code=403, detail="You don't have access to this tower")
    return tower


@router.post("/{tower_id}/vitals")
async def add_vitals(data: VitalsCreate, tower: Tower = Depends(get_writable_tower)):
    return await record_activity(TowerVitals, tower, data.model_dump())


@router.post("/{tower_id}/harvests")
async def add_harvest(data: HarvestCreate, tower: Tower = Depends(get_writable_tower)):
    return await record_activity(Harvest, tower, data.model_dump())


@router.post("/{tower_id}/waste")
async def add_waste(data: WasteCreate, tower: Tower = Depends(get_writable_tower)):
    return await record_activity(WasteLog, tower, data.model_dump())


@router.post("/{tower_id}/photos")
async def add_photo(
        data: PhotoCreate,
        tower: Tower = Depends(get_writable_tower),
        actor: TowerActor = Depends(get_tower_actor),
):
    return await record_activity(TowerPhoto, tower, {**data.model_dump(), "student_name": actor.student_name})


@router.post("/{tower_id}/plantings", response_model=PlantingOut)
async def add_planting(
        data: PlantingCreate,
        tower: Tower = Depends(get_writable_tower),
        actor: TowerActor = Depends(get_tower_actor),
        service: PlantingService = Depends(),
):
    student_id = actor.kiosk.student_id if actor.kiosk else None
    planting = await service.create_planting(tower.id, data, student_id=student_id)
    await notebook_manager.broadcast(tower.id, {"type": "sources_changed"})
    return planting
