from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Request, Response, UploadFile

from sproutify.api.deps import get_current_teacher
from sproutify.core.config import settings
from sproutify.models.profile import Profile
from sproutify.schemas.scouting import (
    EntryStatus,
    FollowUpSuggestion,
    ScoutingEntry,
    ScoutingEntryCreate,
    ScoutingFilters,
    ScoutingStats,
)
from sproutify.services.scouting_service import (
    ScoutingService,
    calculate_scouting_stats,
    export_entries_to_csv,
    filter_entries,
    get_entry_status,
    serialize_entry,
    sort_entries_by_priority,
    suggest_follow_up_date,
)
from sproutify.services.storage_service import save_scouting_images

router = APIRouter(prefix="/api/v1/scouting", tags=["Scouting"])


@router.post("/towers/{tower_id}", response_model=ScoutingEntry)
async def create_entry(
        tower_id: int,
        data: ScoutingEntryCreate,
        current_teacher: Profile = Depends(get_current_teacher),
        service: ScoutingService = Depends(),
):
    return await service.create_entry(tower_id, current_teacher, data)


@router.post("/towers/{tower_id}/images", response_model=List[str])
async def upload_images(
        tower_id: int,
        request: Request,
        files: List[UploadFile] = File(...),
        current_teacher: Profile = Depends(get_current_teacher),
        service: ScoutingService = Depends(),
):
    await service.get_tower_for_teacher(tower_id, current_teacher)
    base_url = settings.PUBLIC_BASE_URL or str(request.base_url)
    return await save_scouting_images(tower_id, files, base_url)


@router.get("/history", response_model=List[ScoutingEntry])
async def get_history(
        filters: ScoutingFilters = Depends(),
        prioritized: bool = False,
        current_teacher: Profile = Depends(get_current_teacher),
        service: ScoutingService = Depends(),
):
    entries = filter_entries(await service.list_entries(current_teacher), filters)
    if prioritized:
        entries = sort_entries_by_priority(entries)
    return entries


@router.get("/stats", response_model=ScoutingStats)
async def get_stats(
        current_teacher: Profile = Depends(get_current_teacher),
        service: ScoutingService = Depends(),
):
    return calculate_scouting_stats(await service.list_entries(current_teacher))


@router.get("/export.csv")
async def export_csv(
        filters: ScoutingFilters = Depends(),
        current_teacher: Profile = Depends(get_current_teacher),
        service: ScoutingService = Depends(),
):
    entries = filter_entries(await service.list_entries(current_teacher), filters)
    filename = f"scouting-history-{date.today().isoformat()}.csv"
    return Response(
        content=export_entries_to_csv(entries),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/follow-up-suggestion", response_model=FollowUpSuggestion)
async def follow_up_suggestion(
        severity: Optional[int] = None,
        pest_type: Optional[str] = None,
        current_teacher: Profile = Depends(get_current_teacher),
):
    follow_up_date, days = suggest_follow_up_date(severity, pest_type)
    return FollowUpSuggestion(follow_up_date=follow_up_date, days=days)


@router.get("/{entry_id}/status", response_model=EntryStatus)
async def entry_status(
        entry_id: int,
        current_teacher: Profile = Depends(get_current_teacher),
        service: ScoutingService = Depends(),
):
    log = await service.get_log_for_teacher(entry_id, current_teacher)
    return get_entry_status(serialize_entry(log))


@router.put("/{entry_id}", response_model=ScoutingEntry)
async def update_entry(
        entry_id: int,
        data: ScoutingEntryCreate,
        current_teacher: Profile = Depends(get_current_teacher),
        service: ScoutingService = Depends(),
):
    return await service.update_entry(entry_id, current_teacher, data)


@router.post("/{entry_id}/toggle-resolved", response_model=ScoutingEntry)
async def toggle_resolved(
        entry_id: int,
        current_teacher: Profile = Depends(get_current_teacher),
        service: ScoutingService = Depends(),
):
    return await service.toggle_resolved(entry_id, current_teacher)


@router.delete("/{entry_id}")
async def delete_entry(
        entry_id: int,
        current_teacher: Profile = Depends(get_current_teacher),
        service: ScoutingService = Depends(),
):
    await service.delete_entry(entry_id, current_teacher)
    return {"message": "Scouting entry deleted"}
