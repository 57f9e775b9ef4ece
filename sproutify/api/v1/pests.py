from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from sproutify.api.deps import require_role
from sproutify.models.profile import Profile
from sproutify.schemas.pest import PestCatalogCreate, PestCatalogOut, TreatmentOption
from sproutify.services.treatment_service import PestCatalogService, get_recommended_treatments, severity_info

router = APIRouter(prefix="/api/v1/pests", tags=["Pests"])


@router.get("", response_model=List[PestCatalogOut])
async def list_pests(
        search: str = "",
        pest_type: str = Query("all", alias="type"),
        location: Optional[str] = None,
        service: PestCatalogService = Depends(),
):
    return await service.list_pests(search=search, pest_type=pest_type, location=location)


@router.get("/{pest_id}", response_model=PestCatalogOut)
async def get_pest(pest_id: int, service: PestCatalogService = Depends()):
    pest = await service.get_pest(pest_id)
    if not pest:
        raise HTTPException(status_code=404, detail="Pest not found")
    return pest


@router.get("/{pest_id}/treatments", response_model=List[TreatmentOption])
async def get_treatments(
        pest_id: int,
        location: str = Query(..., min_length=1),
        service: PestCatalogService = Depends(),
):
    pest = await service.get_pest(pest_id)
    if not pest:
        raise HTTPException(status_code=404, detail="Pest not found")
    return get_recommended_treatments(pest, location)


@router.get("/{pest_id}/severity/{level}", response_model=Dict[str, Any])
async def get_severity(pest_id: int, level: int, service: PestCatalogService = Depends()):
    pest = await service.get_pest(pest_id)
    if not pest:
        raise HTTPException(status_code=404, detail="Pest not found")

    info = severity_info(pest.severity_levels, level)
    if not info:
        raise HTTPException(status_code=404, detail=f"No severity level {level}")
    return info


@router.post("", response_model=PestCatalogOut)
async def create_pest(
        data: PestCatalogCreate,
        current_admin: Profile = Depends(require_role(["super_admin", "district_admin"])),
        service: PestCatalogService = Depends(),
):
    return await service.create_pest(data)
