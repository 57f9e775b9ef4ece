from typing import List

from fastapi import APIRouter, Depends, Query

from sproutify.api.deps import get_current_teacher
from sproutify.models.profile import Profile
from sproutify.schemas.milestone import MilestoneCreate, MilestoneOut, MilestoneUpdate
from sproutify.services.milestone_service import MilestoneService

router = APIRouter(prefix="/api/v1/milestones", tags=["Milestones"])


@router.post("", response_model=MilestoneOut)
async def create_milestone(
        data: MilestoneCreate,
        current_teacher: Profile = Depends(get_current_teacher),
        service: MilestoneService = Depends(),
):
    return await service.create_milestone(current_teacher, data)


@router.get("/recent", response_model=List[MilestoneOut])
async def recent_milestones(
        limit: int = Query(10, ge=1, le=100),
        current_teacher: Profile = Depends(get_current_teacher),
        service: MilestoneService = Depends(),
):
    return await service.list_recent_milestones(current_teacher, limit=limit)


@router.get("/classrooms/{classroom_id}", response_model=List[MilestoneOut])
async def classroom_milestones(
        classroom_id: int,
        current_teacher: Profile = Depends(get_current_teacher),
        service: MilestoneService = Depends(),
):
    return await service.list_classroom_milestones(classroom_id, current_teacher)


@router.patch("/{milestone_id}", response_model=MilestoneOut)
async def update_milestone(
        milestone_id: int,
        data: MilestoneUpdate,
        current_teacher: Profile = Depends(get_current_teacher),
        service: MilestoneService = Depends(),
):
    return await service.update_milestone(milestone_id, current_teacher, data)


@router.delete("/{milestone_id}")
async def delete_milestone(
        milestone_id: int,
        current_teacher: Profile = Depends(get_current_teacher),
        service: MilestoneService = Depends(),
):
    await service.delete_milestone(milestone_id, current_teacher)
    return {"message": "Milestone deleted"}
