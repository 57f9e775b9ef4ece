"""Pytest fixtures for sproutify tests."""

from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from tortoise import Tortoise

from sproutify.init_db import MODEL_MODULES
from sproutify.models.classroom import Classroom
from sproutify.models.pest import PestCatalog
from sproutify.models.profile import Profile
from sproutify.models.tower import Tower
from sproutify.schemas.scouting import ScoutingEntry


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory database per test."""
    await Tortoise.init(db_url="sqlite://:memory:", modules={"models": MODEL_MODULES})
    await Tortoise.generate_schemas()
    yield
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def teacher(db) -> Profile:
    return await Profile.create(email="teacher@school.test", full_name="Ms. Rivera")


@pytest_asyncio.fixture
async def other_teacher(db) -> Profile:
    return await Profile.create(email="other@school.test", full_name="Mr. Chen")


@pytest_asyncio.fixture
async def tower(teacher) -> Tower:
    return await Tower.create(name="Tower A", teacher=teacher)


@pytest_asyncio.fixture
async def classroom(teacher) -> Classroom:
    return await Classroom.create(name="Room 12", teacher=teacher, kiosk_pin="1234", grade_level="3-5")


@pytest_asyncio.fixture
async def aphids(db) -> PestCatalog:
    return await PestCatalog.create(
        name="Aphids",
        type="insect",
        description="Small sap-sucking insects",
        safe_for_schools=True,
        treatment_options=[
            {
                "method": "Insecticidal soap",
                "safe_for_schools": True,
                "effectiveness": "medium",
                "location_suitable": ["indoor", "greenhouse"],
            },
            {
                "method": "Ladybugs",
                "safe_for_schools": True,
                "effectiveness": "high",
                "location_suitable": ["greenhouse", "outdoor"],
            },
        ],
    )


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 5, 15, 12, 0, 0)


@pytest.fixture
def make_entry(now):
    """Build ScoutingEntry objects without touching the database."""
    counter = {"id": 0}

    def _make(**overrides) -> ScoutingEntry:
        counter["id"] += 1
        data = {
            "id": counter["id"],
            "tower_id": 1,
            "tower_name": "Tower A",
            "pest": "Aphids",
            "severity": 1,
            "observed_at": now - timedelta(days=3),
        }
        data.update(overrides)
        return ScoutingEntry(**data)

    return _make
