"""Tests for the planting outcome codec and student seedings."""

import json

import pytest
from fastapi import HTTPException

from sproutify.models.planting import Planting
from sproutify.models.tower import Tower
from sproutify.schemas.planting import PlantingCreate, PlantingOutcome
from sproutify.services.planting_service import PlantingService, decode_outcome, encode_outcome


class TestOutcomeCodec:
    """Tests for decode_outcome and encode_outcome."""

    @pytest.mark.parametrize("raw", [None, ""])
    def test_empty_is_default(self, raw) -> None:
        """No outcome decodes to the default."""
        assert decode_outcome(raw) == PlantingOutcome()

    def test_plain_text_becomes_notes(self) -> None:
        """Legacy plain notes are kept as seeding notes."""
        outcome = decode_outcome("Seeds were soaked overnight")
        assert outcome.seeding_notes == "Seeds were soaked overnight"
        assert outcome.student_id is None

    def test_non_object_json_becomes_notes(self) -> None:
        """Valid JSON that is not an object is treated as text."""
        assert decode_outcome("[1, 2]").seeding_notes == "[1, 2]"

    def test_object(self) -> None:
        """JSON objects are read field by field."""
        raw = json.dumps({"version": 2, "student_id": 7, "seeding_notes": "deep", "predictions": {"days": 10}})
        outcome = decode_outcome(raw)
        assert outcome.student_id == 7
        assert outcome.predictions == {"days": 10}

    def test_unknown_keys_survive(self) -> None:
        """Extra keys written by other clients are preserved on re-encode."""
        raw = json.dumps({"student_id": 3, "germinated": True})
        assert json.loads(encode_outcome(decode_outcome(raw)))["germinated"] is True


class TestPlantingService:
    """Tests for PlantingService."""

    @pytest.mark.asyncio
    async def test_student_seedings(self, tower) -> None:
        """Only plantings whose outcome names the student are listed."""
        service = PlantingService()
        await service.create_planting(tower.id, PlantingCreate(name="Basil", seeding_notes="two per cube"), student_id=5)
        await service.create_planting(tower.id, PlantingCreate(name="Kale"), student_id=6)
        await Planting.create(tower=tower, name="Chard", outcome="plain old notes")

        seedings = await service.list_student_seedings(5)

        assert [s.name for s in seedings] == ["Basil"]
        assert seedings[0].outcome.seeding_notes == "two per cube"

    @pytest.mark.asyncio
    async def test_update_notes_keeps_other_fields(self, tower) -> None:
        """Updating notes merges into the stored outcome."""
        planting = await Planting.create(
            tower=tower, name="Basil", outcome=json.dumps({"student_id": 5, "predictions": {"height_cm": 12}})
        )

        updated = await PlantingService().update_seeding_notes(planting.id, "sprouted on day 4")

        assert updated.outcome.seeding_notes == "sprouted on day 4"
        assert updated.outcome.student_id == 5
        assert updated.outcome.predictions == {"height_cm": 12}

    @pytest.mark.asyncio
    async def test_update_legacy_text(self, tower) -> None:
        """Plain-text outcomes are upgraded to JSON on write."""
        planting = await Planting.create(tower=tower, name="Basil", outcome="old notes")

        await PlantingService().update_seeding_notes(planting.id, "new notes")

        await planting.refresh_from_db()
        assert json.loads(planting.outcome)["seeding_notes"] == "new notes"

    @pytest.mark.asyncio
    async def test_update_missing(self, db) -> None:
        """Unknown planting is a 404."""
        with pytest.raises(HTTPException) as exc:
            await PlantingService().update_seeding_notes(404, "x")
        assert exc.value.status_code == 404


# shape written by the classroom seeding form
SEEDING_FORM_ROW = {
    "seeding_notes": "soaked overnight",
    "predictions": "they will sprout in 5 days",
    "observations": "seeds are tiny",
    "hypothesis": "warm water helps",
    "photos_count": 0,
    "is_seeding_only": True,
    "student_id": 7,
    "student_name": "Ava",
}


class TestSeedingFormRows:
    """Outcome rows as the seeding form stores them."""

    def test_string_predictions(self) -> None:
        """Free-text predictions keep every other key intact."""
        outcome = decode_outcome(json.dumps(SEEDING_FORM_ROW))
        assert outcome.student_id == 7
        assert outcome.seeding_notes == "soaked overnight"
        assert outcome.predictions == "they will sprout in 5 days"
        assert json.loads(encode_outcome(outcome))["student_name"] == "Ava"

    def test_null_notes(self) -> None:
        """A null note is read as empty, not as a broken row."""
        outcome = decode_outcome(json.dumps({"student_id": 7, "seeding_notes": None}))
        assert outcome.student_id == 7
        assert outcome.seeding_notes == ""

    def test_string_student_id(self) -> None:
        """String ids are kept as written and still match the student."""
        outcome = decode_outcome(json.dumps({"student_id": "7"}))
        assert outcome.student_id == "7"
        assert outcome.belongs_to(7)
        assert not outcome.belongs_to(8)

    def test_bad_key_dropped_alone(self) -> None:
        """One invalid typed key never discards the rest of the object."""
        outcome = decode_outcome(json.dumps({"version": "two", "student_id": 7, "seeding_notes": "deep"}))
        assert outcome.version == 1
        assert outcome.student_id == 7
        assert outcome.seeding_notes == "deep"

    @pytest.mark.asyncio
    async def test_listed_for_student(self, tower) -> None:
        """The student's seeding is listed."""
        await Planting.create(tower=tower, name="Basil", outcome=json.dumps(SEEDING_FORM_ROW))

        seedings = await PlantingService().list_student_seedings(7)

        assert [s.name for s in seedings] == ["Basil"]

    @pytest.mark.asyncio
    async def test_update_keeps_form_fields(self, tower) -> None:
        """Editing notes leaves the student and predictions in place."""
        planting = await Planting.create(tower=tower, name="Basil", outcome=json.dumps(SEEDING_FORM_ROW))

        await PlantingService().update_seeding_notes(planting.id, "new notes")

        await planting.refresh_from_db()
        stored = json.loads(planting.outcome)
        assert stored["seeding_notes"] == "new notes"
        assert stored["student_id"] == 7
        assert stored["predictions"] == "they will sprout in 5 days"
        assert stored["student_name"] == "Ava"
        assert stored["is_seeding_only"] is True

    @pytest.mark.asyncio
    async def test_limited_to_towers(self, tower, other_teacher) -> None:
        """Only the given towers are searched."""
        other_tower = await Tower.create(name="Tower B", teacher=other_teacher)
        await Planting.create(tower=tower, name="Basil", outcome=json.dumps({"student_id": 7}))
        await Planting.create(tower=other_tower, name="Kale", outcome=json.dumps({"student_id": 7}))

        seedings = await PlantingService().list_student_seedings(7, tower_ids=[tower.id])

        assert [s.name for s in seedings] == ["Basil"]
