from datetime import date, datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator


class PlantingOutcome(BaseModel):
    """Decoded ``plantings.outcome``; unknown keys survive a round trip."""
    model_config = ConfigDict(extra="allow")

    version: int = 1
    # kiosk clients have stored both numeric and string ids
    student_id: Optional[Union[int, str]] = None
    seeding_notes: str = ""
    predictions: Any = None

    @field_validator("seeding_notes", mode="before")
    @classmethod
    def validate_seeding_notes(cls, v: Any) -> str:
        if v is None:
            return ""
        if not isinstance(v, str):
            return str(v)
        return v

    def belongs_to(self, student_id: int) -> bool:
        if self.student_id is None:
            return False
        return str(self.student_id) == str(student_id)


class PlantingCreate(BaseModel):
    name: str
    catalog_id: Optional[int] = None
    port_number: Optional[int] = None
    seeded_at: Optional[date] = None
    planted_at: Optional[date] = None
    status: str = "seeded"
    seeding_notes: Optional[str] = None
    predictions: Any = None


class PlantingOut(BaseModel):
    id: int
    tower_id: int
    name: str
    port_number: Optional[int] = None
    seeded_at: Optional[date] = None
    planted_at: Optional[date] = None
    status: str
    outcome: PlantingOutcome
    created_at: datetime


class SeedingNotesUpdate(BaseModel):
    seeding_notes: str
