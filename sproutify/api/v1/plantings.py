from typing import List

from fastapi import APIRouter, Depends, HTTPException

from sproutify.api.deps import TowerActor, get_tower_actor
from sproutify.models.planting import Planting
from sproutify.models.tower import Tower
from sproutify.schemas.planting import PlantingOut, SeedingNotesUpdate
from sproutify.services.planting_service import PlantingService

router = APIRouter(prefix="/api/v1/plantings", tags=["Plantings"])


@router.get("/student/{student_id}", response_model=List[PlantingOut])
async def list_student_seedings(
        student_id: int,
        actor: TowerActor = Depends(get_tower_actor),
        service: PlantingService = Depends(),
):
    if actor.kiosk and actor.kiosk.student_id != student_id:
        raise HTTPException(status_code=403, detail="You can only see your own seedings")

    tower_ids = None
    if actor.kiosk or actor.teacher.role == "teacher":
        tower_ids = await Tower.filter(teacher_id=actor.teacher_id).values_list("id", flat=True)
    return await service.list_student_seedings(student_id, tower_ids=tower_ids)


@router.patch("/{planting_id}/notes", response_model=PlantingOut)
async def update_seeding_notes(
        planting_id: int,
        data: SeedingNotesUpdate,
        actor: TowerActor = Depends(get_tower_actor),
        service: PlantingService = Depends(),
):
    planting = await Planting.get_or_none(id=planting_id).prefetch_related("tower")
    if not planting:
        raise HTTPException(status_code=404, detail="Planting not found")
    if not actor.can_write(planting.tower):
        raise HTTPException(status_code=403, detail="You don't have access to this tower")

    return await service.update_seeding_notes(planting_id, data.seeding_notes)
