"""Tests for output classification and generated notebook outputs."""

import base64

import pytest
from fastapi import HTTPException

from sproutify.models.document import TowerDocument
from sproutify.models.planting import Planting
from sproutify.services.output_service import (
    OUTPUT_TYPES,
    OutputService,
    backfill_output_types,
    classify_document,
    output_title,
)


class TestClassifyDocument:
    """Tests for classify_document."""

    @pytest.mark.parametrize(
        "document_type,title,expected",
        [
            ("milestone", "First sprout", "report"),
            ("timeline", "Anything", "timeline"),
            ("faq", "Anything", "faq"),
            ("audio", "Anything", "audio"),
            ("generated", "Tower A Growth Timeline - Basil", "timeline"),
            ("generated", "Tower A Care Guide - Basil", "study-guide"),
            ("generated", "Plant FAQ", "faq"),
            ("generated", "Weekly Report", "report"),
            ("generated", "Something else", "study-guide"),
            (None, "Chat Notes - 05/01/2024", "study-guide"),
            ("unheard-of", None, "study-guide"),
        ],
    )
    def test_classification(self, document_type, title, expected) -> None:
        """Explicit types map directly, generated titles go through keywords."""
        assert classify_document(document_type, title, "text/plain") == expected

    def test_timeline_keyword_checked_first(self) -> None:
        """A title with several keywords takes the first in the cascade."""
        assert classify_document("generated", "Timeline Report FAQ") == "timeline"

    @pytest.mark.parametrize("document_type", [None, "", "milestone", "generated", "pdf", "chat"])
    def test_always_a_known_type(self, document_type) -> None:
        """Classification never leaves the known output types."""
        assert classify_document(document_type, "whatever") in OUTPUT_TYPES

    def test_output_titles(self) -> None:
        """Every output type has a label, anything else gets a generic one."""
        assert output_title("timeline") == "Growth Timeline"
        assert all(output_title(t) != "Generated Content" for t in OUTPUT_TYPES)
        assert output_title("poster") == "Generated Content"


class TestOutputService:
    """Tests for OutputService."""

    @pytest.mark.asyncio
    async def test_create_timeline(self, teacher, tower) -> None:
        """Generated document is stored with an explicit output type and a data URI."""
        await Planting.create(tower=tower, name="Basil")
        await Planting.create(tower=tower, name="Kale")

        output = await OutputService().create_output(tower.id, teacher.id, "timeline")

        assert output.type == "timeline"
        assert output.title.startswith("Tower A Growth Timeline - ")
        assert "Basil" in output.title and "Kale" in output.title

        doc = await TowerDocument.get(id=output.id)
        assert doc.output_type == "timeline"
        assert doc.document_type == "timeline"
        prefix = "data:text/plain;base64,"
        assert doc.file_url.startswith(prefix)
        assert base64.b64decode(doc.file_url[len(prefix):]).decode("utf-8") == doc.content

    @pytest.mark.asyncio
    async def test_create_audio_without_template(self, teacher, tower) -> None:
        """Types without a template still keep their own tag."""
        output = await OutputService().create_output(tower.id, teacher.id, "audio")
        doc = await TowerDocument.get(id=output.id)

        assert output.type == "audio"
        assert doc.document_type == "generated"
        assert doc.content.startswith("Generated audio content for ")

    @pytest.mark.asyncio
    async def test_unknown_type_rejected(self, teacher, tower) -> None:
        """Unknown output type is a 400 and nothing is written."""
        with pytest.raises(HTTPException) as exc:
            await OutputService().create_output(tower.id, teacher.id, "poster")
        assert exc.value.status_code == 400
        assert await TowerDocument.all().count() == 0

    @pytest.mark.asyncio
    async def test_missing_teacher_rejected(self, tower) -> None:
        """A save without a teacher id fails before writing."""
        with pytest.raises(HTTPException) as exc:
            await OutputService().create_output(tower.id, None, "faq")
        assert exc.value.status_code == 400

    @pytest.mark.asyncio
    async def test_list_newest_first(self, teacher, tower) -> None:
        """Outputs come back newest first, limited."""
        service = OutputService()
        for output_type in ("faq", "report", "timeline"):
            await service.create_output(tower.id, teacher.id, output_type)

        outputs = await service.list_outputs(tower.id, limit=2)
        assert [o.type for o in outputs] == ["timeline", "report"]

    @pytest.mark.asyncio
    async def test_backfill_legacy_rows(self, teacher, tower) -> None:
        """Rows without an output type are tagged once."""
        await TowerDocument.create(tower=tower, title="Weekly Report", document_type="generated")
        await TowerDocument.create(tower=tower, title="Stage", document_type="milestone")

        assert await backfill_output_types() == 2
        assert sorted(await TowerDocument.all().values_list("output_type", flat=True)) == ["report", "report"]
        assert await backfill_output_types() == 0
