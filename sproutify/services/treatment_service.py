import json
from typing import Any, Iterable, List, Optional

from pydantic import ValidationError

from sproutify.core.logger import app_logger, db_logger
from sproutify.models.pest import PestCatalog
from sproutify.schemas.pest import PestCatalogCreate, PestCatalogOut, TreatmentOption

EFFECTIVENESS_RANK = {"high": 3, "medium": 2, "low": 1}

# severity levels offered for observations typed in by hand
CUSTOM_SEVERITY_LEVELS = [
    {"level": 1, "description": "Low", "color": "green", "action": "Monitor closely"},
    {"level": 2, "description": "Medium", "color": "yellow", "action": "Take action soon"},
    {"level": 3, "description": "High", "color": "red", "action": "Immediate action needed"},
]


def effectiveness_rank(option: TreatmentOption) -> int:
    return EFFECTIVENESS_RANK.get((option.effectiveness or "").lower(), 0)


def decode_treatment_options(raw: Any) -> List[TreatmentOption]:
    """
    Decode the treatment_options column into a list of options.

    The column has been written as an array of options, as a single option
    object and as a ``method -> option`` mapping, sometimes as JSON text.
    Anything unreadable decodes to an empty list.
    """
    if raw is None:
        return []

    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            app_logger.warning("Unreadable treatment_options text, treating as empty")
            return []

    if isinstance(raw, dict):
        if "method" in raw:
            items = [raw]
        else:
            items = []
            for method, option in raw.items():
                if isinstance(option, dict):
                    items.append({"method": method, **option})
    elif isinstance(raw, list):
        items = raw
    else:
        return []

    options = []
    for item in items:
        if isinstance(item, TreatmentOption):
            options.append(item)
            continue
        if not isinstance(item, dict):
            continue
        try:
            options.append(TreatmentOption.model_validate(item))
        except ValidationError:
            app_logger.debug(f"Skipping malformed treatment option: {item!r}")
    return options


def get_recommended_treatments(pest: Any, location: str) -> List[TreatmentOption]:
    """School-safe options suitable for ``location``, most effective first."""
    if not pest:
        return []

    if isinstance(pest, dict):
        raw = pest.get("treatment_options")
    else:
        raw = getattr(pest, "treatment_options", None)

    options = [
        option for option in decode_treatment_options(raw)
        if option.safe_for_schools and location in option.location_suitable
    ]
    return sorted(options, key=lambda o: (-effectiveness_rank(o), not o.safe_for_schools))


def pest_matches(pest: PestCatalogOut, search: str = "", pest_type: str = "all", location: str = None) -> bool:
    if search:
        term = search.lower()
        if term not in pest.name.lower() and term not in (pest.description or "").lower():
            return False

    if pest_type and pest_type != "all" and pest.type != pest_type:
        return False

    if location:
        return any(location in option.location_suitable for option in pest.treatment_options)

    return True


def filter_pest_catalog(
        pests: Iterable[PestCatalogOut],
        search: str = "",
        pest_type: str = "all",
        location: str = None
) -> List[PestCatalogOut]:
    return [p for p in pests if pest_matches(p, search, pest_type, location)]


def severity_info(severity_levels: Optional[list], severity: int) -> Optional[dict]:
    for level in severity_levels or CUSTOM_SEVERITY_LEVELS:
        if isinstance(level, dict) and level.get("level") == severity:
            return level
    return None


def serialize_pest(pest: PestCatalog) -> PestCatalogOut:
    return PestCatalogOut(
        id=pest.id,
        name=pest.name,
        scientific_name=pest.scientific_name,
        type=pest.type,
        description=pest.description or "",
        identification_tips=pest.identification_tips or [],
        symptoms=pest.symptoms or [],
        severity_levels=[l for l in (pest.severity_levels or []) if isinstance(l, dict)],
        treatment_options=decode_treatment_options(pest.treatment_options),
        prevention_tips=pest.prevention_tips or [],
        safe_for_schools=pest.safe_for_schools,
        common_locations=pest.common_locations or [],
    )


class PestCatalogService:

    async def list_pests(self, search: str = "", pest_type: str = "all", location: str = None):
        pests = await PestCatalog.filter(safe_for_schools=True).order_by("name")
        result = filter_pest_catalog([serialize_pest(p) for p in pests], search, pest_type, location)
        app_logger.debug(f"Pest catalog: {len(result)} of {len(pests)} entries match")
        return result

    async def get_pest(self, pest_id: int) -> Optional[PestCatalogOut]:
        pest = await PestCatalog.get_or_none(id=pest_id)
        return serialize_pest(pest) if pest else None

    async def create_pest(self, data: PestCatalogCreate) -> PestCatalogOut:
        pest = await PestCatalog.create(**data.model_dump())
        db_logger.log_create("PestCatalog", {"id": pest.id, "name": pest.name, "type": pest.type})
        return serialize_pest(pest)
