"""Tests for scouting image storage."""

import io
import os
from datetime import datetime

import pytest
from fastapi import HTTPException, UploadFile
from starlette.datastructures import Headers

from sproutify.core.config import settings
from sproutify.services.storage_service import build_scouting_path, save_scouting_images


def upload(name: str, content_type: str) -> UploadFile:
    return UploadFile(
        file=io.BytesIO(b"\x89PNG fake"),
        filename=name,
        headers=Headers({"content-type": content_type}),
    )


@pytest.fixture
def static_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "STATIC_DIR", str(tmp_path))
    return tmp_path


class TestScoutingPath:
    """Tests for build_scouting_path."""

    def test_layout(self) -> None:
        """scouting/<tower>/<millis>-<random>.<ext>"""
        path = build_scouting_path(7, "Leaf.JPG", datetime(2024, 5, 1))
        folder, tower_id, name = path.split("/")
        assert (folder, tower_id) == ("scouting", "7")
        assert name.endswith(".jpg")
        assert name.split("-")[0] == str(int(datetime(2024, 5, 1).timestamp() * 1000))

    def test_unique(self) -> None:
        """Two uploads in the same millisecond still get different names."""
        now = datetime(2024, 5, 1)
        assert build_scouting_path(1, "a.png", now) != build_scouting_path(1, "a.png", now)


class TestSaveScoutingImages:
    """Tests for save_scouting_images."""

    @pytest.mark.asyncio
    async def test_saves_and_returns_urls(self, static_dir) -> None:
        """Files land under the static directory and URLs point at /static."""
        urls = await save_scouting_images(3, [upload("leaf.png", "image/png")], "http://testserver/")

        assert len(urls) == 1
        assert urls[0].startswith("http://testserver/static/scouting/3/")
        relative = urls[0].split("/static/", 1)[1]
        assert os.path.exists(static_dir / relative)

    @pytest.mark.asyncio
    async def test_too_many(self, static_dir) -> None:
        """More than five images is a 400."""
        files = [upload(f"{i}.png", "image/png") for i in range(6)]
        with pytest.raises(HTTPException) as exc:
            await save_scouting_images(3, files, "http://testserver/")
        assert exc.value.status_code == 400

    @pytest.mark.asyncio
    async def test_non_image_rolls_back(self, static_dir) -> None:
        """A non-image rejects the batch and removes files already written."""
        files = [upload("leaf.png", "image/png"), upload("notes.pdf", "application/pdf")]
        with pytest.raises(HTTPException) as exc:
            await save_scouting_images(3, files, "http://testserver/")

        assert exc.value.status_code == 400
        assert list((static_dir / "scouting" / "3").iterdir()) == []
