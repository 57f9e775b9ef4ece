import json
from typing import Iterable, List, Optional

from fastapi import HTTPException
from pydantic import ValidationError

from sproutify.core.logger import db_logger
from sproutify.models.planting import Planting
from sproutify.schemas.planting import PlantingCreate, PlantingOut, PlantingOutcome


def decode_outcome(raw: Optional[str]) -> PlantingOutcome:
    """
    Read a stored outcome column.

    Older rows hold plain notes instead of JSON; those come back as the
    default outcome with the text kept as ``seeding_notes``. A JSON object
    is always read as an object: a key that fails validation is dropped and
    every other key is kept.
    """
    if not raw:
        return PlantingOutcome()

    try:
        data = json.loads(raw)
    except ValueError:
        return PlantingOutcome(seeding_notes=raw)

    if not isinstance(data, dict):
        return PlantingOutcome(seeding_notes=raw)

    try:
        return PlantingOutcome(**data)
    except ValidationError as e:
        invalid = {err["loc"][0] for err in e.errors() if err["loc"]}
        db_logger.logger.warning(f"Dropping invalid planting outcome keys: {sorted(invalid)}")
        return PlantingOutcome(**{k: v for k, v in data.items() if k not in invalid})


def encode_outcome(outcome: PlantingOutcome) -> str:
    return json.dumps(outcome.model_dump(exclude_none=True), default=str)


def serialize_planting(planting: Planting) -> PlantingOut:
    return PlantingOut(
        id=planting.id,
        tower_id=planting.tower_id,
        name=planting.name,
        port_number=planting.port_number,
        seeded_at=planting.seeded_at,
        planted_at=planting.planted_at,
        status=planting.status,
        outcome=decode_outcome(planting.outcome),
        created_at=planting.created_at,
    )


class PlantingService:

    async def create_planting(self, tower_id: int, data: PlantingCreate, student_id: int = None) -> PlantingOut:
        outcome = PlantingOutcome(
            student_id=student_id,
            seeding_notes=data.seeding_notes or "",
            predictions=data.predictions,
        )

        planting = await Planting.create(
            tower_id=tower_id,
            catalog_id=data.catalog_id,
            name=data.name,
            port_number=data.port_number,
            seeded_at=data.seeded_at,
            planted_at=data.planted_at,
            status=data.status,
            outcome=encode_outcome(outcome),
        )

        db_logger.log_create("Planting", {
            "id": planting.id,
            "tower_id": tower_id,
            "name": data.name,
            "student_id": student_id
        })
        return serialize_planting(planting)

    async def list_student_seedings(
            self, student_id: int, tower_ids: Optional[Iterable[int]] = None
    ) -> List[PlantingOut]:
        query = Planting.filter(outcome__isnull=False)
        if tower_ids is not None:
            query = query.filter(tower_id__in=list(tower_ids))

        # outcome is free text, so the student match happens after decoding
        seedings = [
            serialize_planting(p) for p in await query.order_by("-created_at")
            if decode_outcome(p.outcome).belongs_to(student_id)
        ]

        db_logger.logger.debug(f"Found {len(seedings)} seedings for student {student_id}")
        return seedings

    async def update_seeding_notes(self, planting_id: int, notes: str) -> PlantingOut:
        planting = await Planting.get_or_none(id=planting_id)
        if not planting:
            raise HTTPException(status_code=404, detail="Planting not found")

        outcome = decode_outcome(planting.outcome)
        outcome.seeding_notes = notes
        planting.outcome = encode_outcome(outcome)
        await planting.save(update_fields=["outcome"])

        db_logger.log_update("Planting", planting_id, {"seeding_notes": notes})
        return serialize_planting(planting)
