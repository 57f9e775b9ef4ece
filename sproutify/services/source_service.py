import asyncio
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Tuple

from sproutify.core.logger import db_logger
from sproutify.models.harvest import Harvest, WasteLog
from sproutify.models.pest import PestLog
from sproutify.models.planting import Planting
from sproutify.models.tower import TowerPhoto, TowerVitals
from sproutify.schemas.notebook import SourceItem
from sproutify.services.scouting_service import as_naive_utc

# source type -> id prefix used in selected-source ids
SOURCE_PREFIXES = {
    "plant": "plant",
    "vitals": "vital",
    "harvest": "harvest",
    "waste": "waste",
    "pest": "pest",
    "photo": "photo",
}
PREFIX_TYPES = {prefix: source_type for source_type, prefix in SOURCE_PREFIXES.items()}

Fetcher = Callable[[int], Awaitable[list]]


def source_id(source_type: str, row_id) -> str:
    return f"{SOURCE_PREFIXES[source_type]}-{row_id}"


def parse_source_id(value: str) -> Optional[Tuple[str, int]]:
    """``"vital-12"`` -> ``("vitals", 12)``; None for anything else."""
    prefix, _, raw_id = (value or "").partition("-")
    if prefix not in PREFIX_TYPES or not raw_id.isdigit():
        return None
    return PREFIX_TYPES[prefix], int(raw_id)


def grams(value) -> str:
    return f"{value:g}" if isinstance(value, float) else str(value)


# --------------------------------------
# Row -> SourceItem
# --------------------------------------
def planting_source(row) -> SourceItem:
    return SourceItem(
        id=source_id("plant", row.id),
        type="plant",
        title=row.name,
        date=row.created_at,
        description=f"Port {row.port_number}" if row.port_number else None,
    )


def vitals_source(row) -> SourceItem:
    return SourceItem(
        id=source_id("vitals", row.id),
        type="vitals",
        title="pH & EC Reading",
        date=row.created_at,
        description=f"pH: {row.ph}, EC: {row.ec}",
    )


def harvest_source(row) -> SourceItem:
    destination = f" → {row.destination}" if row.destination else ""
    return SourceItem(
        id=source_id("harvest", row.id),
        type="harvest",
        title=f"{row.plant_name or 'Plant'} Harvest",
        date=row.created_at,
        description=f"{grams(row.weight_grams)}g{destination}",
    )


def waste_source(row) -> SourceItem:
    return SourceItem(
        id=source_id("waste", row.id),
        type="waste",
        title=f"{row.plant_name or 'Plant'} Waste",
        date=row.created_at,
        description=f"{grams(row.grams)}g - {row.notes or 'No notes'}",
    )


def pest_source(row) -> SourceItem:
    text = row.pest or ""
    return SourceItem(
        id=source_id("pest", row.id),
        type="pest",
        title="Pest Observation",
        date=row.created_at,
        description=f"{text[:50]}..." if len(text) > 50 else text,
    )


def photo_source(row) -> SourceItem:
    return SourceItem(
        id=source_id("photo", row.id),
        type="photo",
        title="Tower Photo",
        date=row.created_at,
        description=row.caption or "No description",
    )


NORMALIZERS = {
    "plant": planting_source,
    "vitals": vitals_source,
    "harvest": harvest_source,
    "waste": waste_source,
    "pest": pest_source,
    "photo": photo_source,
}


# --------------------------------------
# Default fetchers
# --------------------------------------
async def fetch_plantings(tower_id: int):
    return await Planting.filter(tower_id=tower_id)


async def fetch_vitals(tower_id: int):
    return await TowerVitals.filter(tower_id=tower_id)


async def fetch_harvests(tower_id: int):
    return await Harvest.filter(tower_id=tower_id)


async def fetch_waste(tower_id: int):
    return await WasteLog.filter(tower_id=tower_id)


async def fetch_pests(tower_id: int):
    return await PestLog.filter(tower_id=tower_id)


async def fetch_photos(tower_id: int):
    return await TowerPhoto.filter(tower_id=tower_id)


DEFAULT_FETCHERS: Dict[str, Fetcher] = {
    "plant": fetch_plantings,
    "vitals": fetch_vitals,
    "harvest": fetch_harvests,
    "waste": fetch_waste,
    "pest": fetch_pests,
    "photo": fetch_photos,
}


class SourceAggregator:
    """Collects every record of a tower into one newest-first list."""

    def __init__(self, fetchers: Dict[str, Fetcher] = None):
        self.fetchers = fetchers or DEFAULT_FETCHERS

    async def fetch_one(self, source_type: str, tower_id: int) -> List[SourceItem]:
        try:
            rows = await self.fetchers[source_type](tower_id)
            return [NORMALIZERS[source_type](row) for row in rows or []]
        except Exception as e:
            db_logger.log_error(f"fetch_sources[{source_type}] tower={tower_id}", e)
            return []

    async def collect(self, tower_id: int) -> List[SourceItem]:
        results = await asyncio.gather(
            *(self.fetch_one(source_type, tower_id) for source_type in self.fetchers)
        )

        sources = [item for group in results for item in group]
        sources.sort(key=lambda s: as_naive_utc(s.date), reverse=True)

        db_logger.logger.debug(f"Collected {len(sources)} sources for tower {tower_id}")
        return sources


class SourceSelection:
    """Selected source ids; everything starts selected."""

    def __init__(self, sources: Iterable[SourceItem] = ()):
        self.available = [s.id for s in sources]
        self.selected = set(self.available)

    def toggle(self, item_id: str) -> bool:
        if item_id not in self.available:
            return False
        if item_id in self.selected:
            self.selected.discard(item_id)
        else:
            self.selected.add(item_id)
        return item_id in self.selected

    def select_all(self):
        self.selected = set(self.available)

    def clear(self):
        self.selected = set()

    def ids(self) -> List[str]:
        return [item_id for item_id in self.available if item_id in self.selected]
