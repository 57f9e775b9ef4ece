from tortoise import Tortoise

from sproutify.core.config import settings
from sproutify.core.logger import app_logger

MODEL_MODULES = [
    "sproutify.models.profile",
    "sproutify.models.classroom",
    "sproutify.models.tower",
    "sproutify.models.planting",
    "sproutify.models.harvest",
    "sproutify.models.pest",
    "sproutify.models.document",
    "sproutify.models.ai_usage",
]

TORTOISE_ORM = {
    "connections": {
        "default": settings.PG_URL
    },
    "apps": {
        "models": {
            "models": MODEL_MODULES + ["aerich.models"],
            "default_connection": "default",
        }
    },
}

DEFAULT_PEST_CATALOG = [
    {
        "name": "Aphids",
        "type": "pest",
        "description": "Small soft-bodied insects clustering under leaves and on new growth.",
        "identification_tips": ["Green, black or white specks under leaves", "Sticky honeydew on leaves"],
        "symptoms": ["Curled leaves", "Yellowing", "Stunted growth"],
        "severity_levels": [
            {"level": 1, "description": "A few insects", "color": "green", "action": "Monitor closely"},
            {"level": 2, "description": "Colonies on several plants", "color": "yellow", "action": "Take action soon"},
            {"level": 3, "description": "Heavy infestation", "color": "red", "action": "Immediate action needed"},
        ],
        "treatment_options": [
            {
                "method": "Water spray",
                "safe_for_schools": True,
                "effectiveness": "medium",
                "location_suitable": ["indoor", "greenhouse", "outdoor"],
                "instructions": "Spray leaves firmly with water to knock insects off.",
            },
            {
                "method": "Insecticidal soap",
                "safe_for_schools": True,
                "effectiveness": "high",
                "location_suitable": ["indoor", "greenhouse", "outdoor"],
                "instructions": "Apply to both sides of the leaves every 5-7 days.",
                "materials": ["Insecticidal soap", "Spray bottle"],
                "precautions": ["Test on a single leaf first"],
            },
            {
                "method": "Ladybugs",
                "safe_for_schools": True,
                "effectiveness": "high",
                "location_suitable": ["greenhouse", "outdoor"],
                "instructions": "Release beneficial insects in the evening.",
            },
        ],
        "prevention_tips": ["Inspect new plants before adding them to the tower"],
        "safe_for_schools": True,
        "common_locations": ["indoor", "greenhouse", "outdoor"],
    },
    {
        "name": "Powdery Mildew",
        "type": "disease",
        "description": "White powdery fungal growth on leaf surfaces.",
        "identification_tips": ["White dusty patches on upper leaf surfaces"],
        "symptoms": ["White spots", "Leaf drop"],
        "severity_levels": [
            {"level": 1, "description": "Isolated spots", "color": "green", "action": "Monitor closely"},
            {"level": 2, "description": "Several leaves affected", "color": "yellow", "action": "Take action soon"},
            {"level": 3, "description": "Whole plants covered", "color": "red", "action": "Immediate action needed"},
        ],
        "treatment_options": [
            {
                "method": "Remove affected leaves",
                "safe_for_schools": True,
                "effectiveness": "medium",
                "location_suitable": ["indoor", "greenhouse", "outdoor"],
                "instructions": "Cut off and bag affected leaves, away from the tower.",
            },
            {
                "method": "Baking soda spray",
                "safe_for_schools": True,
                "effectiveness": "low",
                "location_suitable": ["indoor", "greenhouse"],
                "instructions": "One tablespoon of baking soda per gallon of water.",
            },
        ],
        "prevention_tips": ["Improve air circulation around the tower"],
        "safe_for_schools": True,
        "common_locations": ["indoor", "greenhouse"],
    },
]


async def init_db():
    await Tortoise.init(config=TORTOISE_ORM)
    await Tortoise.generate_schemas()


async def init_db_data():
    from sproutify.models.pest import PestCatalog
    from sproutify.services.output_service import backfill_output_types

    if not await PestCatalog.exists():
        for item in DEFAULT_PEST_CATALOG:
            await PestCatalog.create(**item)
        app_logger.info(f"Seeded {len(DEFAULT_PEST_CATALOG)} pest catalog entries")

    await backfill_output_types()
