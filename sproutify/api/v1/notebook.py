from typing import List

from fastapi import APIRouter, Depends

from sproutify.api.deps import TowerActor, get_tower_actor, get_writable_tower
from sproutify.models.tower import Tower
from sproutify.schemas.notebook import CreateOutputRequest, GeneratedOutput, SourcesResponse
from sproutify.services.notebook_manager import NotebookConnectionManager
from sproutify.services.output_service import OutputService
from sproutify.services.source_service import SourceAggregator, SourceSelection

router = APIRouter(prefix="/api/v1/notebook", tags=["Notebook"])

notebook_manager = NotebookConnectionManager()


@router.get("/{tower_id}/sources", response_model=SourcesResponse)
async def get_sources(tower: Tower = Depends(get_writable_tower)):
    sources = await SourceAggregator().collect(tower.id)
    return SourcesResponse(sources=sources, selected=SourceSelection(sources).ids())


@router.get("/{tower_id}/outputs", response_model=List[GeneratedOutput])
async def list_outputs(
        limit: int = 10,
        tower: Tower = Depends(get_writable_tower),
        service: OutputService = Depends(),
):
    return await service.list_outputs(tower.id, limit=limit)


@router.post("/{tower_id}/outputs", response_model=GeneratedOutput)
async def create_output(
        req: CreateOutputRequest,
        tower: Tower = Depends(get_writable_tower),
        actor: TowerActor = Depends(get_tower_actor),
        service: OutputService = Depends(),
):
    output = await service.create_output(tower.id, actor.teacher_id, req.type)
    await notebook_manager.broadcast(tower.id, {"type": "outputs_changed"})
    return output
