import base64
import re
import secrets
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException

from sproutify.core.logger import db_logger
from sproutify.models.document import TowerDocument
from sproutify.models.planting import Planting
from sproutify.models.tower import Tower
from sproutify.schemas.notebook import GeneratedOutput

OUTPUT_TYPES = ("study-guide", "faq", "timeline", "audio", "report", "visualization")
DEFAULT_OUTPUT_TYPE = "study-guide"

EXPLICIT_DOCUMENT_TYPES = {
    "milestone": "report",
    "timeline": "timeline",
    "study-guide": "study-guide",
    "faq": "faq",
    "report": "report",
    "audio": "audio",
    "visualization": "visualization",
}

# checked in order against lower-cased titles of "generated" documents
TITLE_KEYWORDS = [
    (("timeline",), "timeline"),
    (("study guide", "care guide"), "study-guide"),
    (("faq",), "faq"),
    (("report",), "report"),
]

OUTPUT_TITLES = {
    "study-guide": "Study Guide",
    "faq": "FAQ",
    "timeline": "Growth Timeline",
    "audio": "Audio Overview",
    "report": "Report",
    "visualization": "Visualization",
}

SPECIFIC_TITLES = {
    "timeline": "Growth Timeline",
    "study-guide": "Care Guide",
    "faq": "FAQ",
    "audio": "Audio Overview",
    "report": "Progress Report",
    "visualization": "Growth Visualization",
}


def classify_document(document_type: Optional[str], title: Optional[str], file_type: Optional[str] = None) -> str:
    """Map a document row to one of OUTPUT_TYPES. Never fails."""
    if document_type in EXPLICIT_DOCUMENT_TYPES:
        return EXPLICIT_DOCUMENT_TYPES[document_type]

    if document_type == "generated":
        lowered = (title or "").lower()
        for keywords, output_type in TITLE_KEYWORDS:
            if any(k in lowered for k in keywords):
                return output_type

    # chat notes (text/plain "Chat Notes - ...") land here as well
    return DEFAULT_OUTPUT_TYPE


def document_output_type(doc: TowerDocument) -> str:
    if doc.output_type in OUTPUT_TYPES:
        return doc.output_type
    return classify_document(doc.document_type, doc.title, doc.file_type)


def output_title(output_type: str) -> str:
    return OUTPUT_TITLES.get(output_type, "Generated Content")


def encode_to_base64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def text_data_url(text: str) -> str:
    return f"data:text/plain;base64,{encode_to_base64(text)}"


def safe_file_name(title: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", title)


def random_file_path(folder: str) -> str:
    return f"{folder}/{int(datetime.now().timestamp() * 1000)}-{secrets.token_hex(5)}.txt"


# --------------------------------------
# Templated content
# --------------------------------------
def timeline_content(title: str) -> str:
    return f"""# {title}

## Growth Timeline Overview

### Week 1-2: Germination Phase
- Seeds sprout and develop first leaves
- Root system begins to establish
- Monitor moisture levels carefully

### Week 3-4: Vegetative Growth
- Rapid leaf development and stem growth
- Monitor pH levels (5.5-6.5 optimal)

### Week 5-6: Flowering Phase
- First flowers appear
- Monitor nutrient levels closely

### Week 7-8: Harvest Ready
- Fruits mature and are ready for harvest
- Plan harvest timing

## Key Monitoring Points
- Daily pH checks
- Weekly EC monitoring
- Visual inspection for pests
- Growth rate tracking"""


def study_guide_content(title: str) -> str:
    return f"""# {title}

## Tower Care Basics

### Essential Daily Tasks
1. **pH Monitoring**: check daily, optimal range 5.5-6.5
2. **Visual Inspection**: look for pest damage and check plant health

### Weekly Maintenance
1. **EC Level Testing**: optimal range 1.2-2.0 mS/cm
2. **System Cleaning**: check water circulation and pump function

### Monthly Tasks
1. **Deep System Clean**: flush and sanitize all components
2. **Plant Rotation**: plan the next crop cycle

## Troubleshooting Guide
- **Yellow leaves**: check nutrient levels
- **Slow growth**: verify pH and EC
- **Pest issues**: scout and apply school-safe treatments
- **Root problems**: check water quality"""


def faq_content(title: str) -> str:
    return f"""# {title}

## Frequently Asked Questions

**Q: How often should I check the pH?**
A: Daily. The ideal range is 5.5-6.5.

**Q: What's the ideal temperature for my tower?**
A: 65-75°F (18-24°C).

**Q: How much light do my plants need?**
A: 14-16 hours of light a day.

**Q: When should I change the nutrient solution?**
A: Every 2-3 weeks or when EC drops significantly.

**Q: What should I do if I see pests?**
A: Record a scouting observation and follow the recommended school-safe treatments."""


def report_content(title: str) -> str:
    return f"""# {title}

## Tower Performance Report

### Key Achievements
- Consistent pH maintenance
- Regular scouting observations
- Harvests recorded on time

### Areas for Improvement
- Increase harvest frequency
- Optimize nutrient timing

### Next Steps
- Plan next crop cycle
- Review growth data trends"""


CONTENT_BUILDERS = {
    "timeline": timeline_content,
    "study-guide": study_guide_content,
    "faq": faq_content,
    "report": report_content,
}


def build_output_content(output_type: str, title: str) -> str:
    builder = CONTENT_BUILDERS.get(output_type)
    if builder:
        return builder(title)
    return f"Generated {output_type} content for {title}"


def serialize_output(doc: TowerDocument) -> GeneratedOutput:
    return GeneratedOutput(
        id=doc.id,
        type=document_output_type(doc),
        title=doc.title,
        date=doc.created_at,
        status="completed",
        content=doc.content,
        document_type=doc.document_type,
        milestone_type=doc.milestone_type,
    )


async def backfill_output_types() -> int:
    """Tag legacy documents that predate the output_type column."""
    docs = await TowerDocument.filter(output_type__isnull=True)
    for doc in docs:
        doc.output_type = classify_document(doc.document_type, doc.title, doc.file_type)
        await doc.save(update_fields=["output_type"])

    if docs:
        db_logger.logger.info(f"Backfilled output_type on {len(docs)} documents")
    return len(docs)


class OutputService:

    async def list_outputs(self, tower_id: int, limit: int = 10) -> List[GeneratedOutput]:
        docs = await TowerDocument.filter(tower_id=tower_id).order_by("-created_at", "-id").limit(limit)
        return [serialize_output(doc) for doc in docs]

    async def specific_title(self, output_type: str, tower_id: int) -> str:
        tower = await Tower.get_or_none(id=tower_id)
        tower_name = tower.name if tower else "Tower"

        plantings = await Planting.filter(tower_id=tower_id).order_by("-created_at").limit(3)
        plant_names = ", ".join(p.name for p in plantings) or "plants"

        label = SPECIFIC_TITLES.get(output_type)
        if not label:
            return f"{tower_name} Generated Content"
        return f"{tower_name} {label} - {plant_names}"

    async def create_output(self, tower_id: int, teacher_id: Optional[int], output_type: str) -> GeneratedOutput:
        if output_type not in OUTPUT_TYPES:
            raise HTTPException(status_code=400, detail=f"Unknown output type: {output_type}")

        if not teacher_id:
            raise HTTPException(status_code=400, detail="No teacher ID found. Please refresh and try again.")

        title = await self.specific_title(output_type, tower_id)
        content = build_output_content(output_type, title)
        document_type = output_type if output_type in CONTENT_BUILDERS else "generated"

        try:
            doc = await TowerDocument.create(
                tower_id=tower_id,
                teacher_id=teacher_id,
                title=title,
                description=f"Generated {output_type} document",
                document_type=document_type,
                output_type=output_type,
                content=content,
                file_name=f"{safe_file_name(title)}.txt",
                file_path=random_file_path("generated"),
                file_url=text_data_url(content),
                file_size=len(content),
                file_type="text/plain",
            )
        except Exception as e:
            db_logger.log_error("create_output", e)
            raise HTTPException(status_code=500, detail=f"Failed to save {output_type}. Please try again.")

        db_logger.log_create("TowerDocument", {
            "id": doc.id,
            "tower_id": tower_id,
            "title": title,
            "output_type": output_type
        })
        return serialize_output(doc)
