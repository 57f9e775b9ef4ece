from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ScoutingEntry(BaseModel):
    id: int
    tower_id: int
    tower_name: str = ""
    tower_location: Optional[str] = None
    pest: str
    pest_catalog_id: Optional[int] = None
    pest_type: Optional[str] = None
    severity: Optional[int] = None
    location_on_tower: Optional[str] = None
    affected_plants: Optional[List[str]] = None
    notes: Optional[str] = None
    action: Optional[str] = None
    treatment_applied: List[str] = []
    follow_up_needed: bool = False
    follow_up_date: Optional[date] = None
    resolved: bool = False
    resolved_at: Optional[datetime] = None
    observed_at: datetime
    created_at: Optional[datetime] = None
    images: Optional[List[str]] = None

    class Config:
        from_attributes = True


class ScoutingEntryCreate(BaseModel):
    pest_catalog_id: Optional[int] = None
    custom_pest: Optional[str] = None
    severity: int = Field(1, ge=1, le=3)
    location_on_tower: Optional[str] = None
    affected_plants: List[str] = []
    symptoms: str = ""
    action: Optional[str] = None
    treatment_applied: List[str] = []
    follow_up_needed: bool = False
    follow_up_date: Optional[date] = None
    images: List[str] = []


class ScoutingFilters(BaseModel):
    search: str = ""
    tower_id: Optional[int] = None
    status: str = "all"  # all | active | follow-up | resolved
    severity: Optional[int] = None
    pest_type: str = "all"
    date_range: str = "all"  # all | week | month | quarter


class EntryStatus(BaseModel):
    status: str
    label: str
    color: str


class PestCount(BaseModel):
    pest: str
    count: int


class ScoutingStats(BaseModel):
    total: int
    active: int
    resolved: int
    overdue: int
    follow_up_needed: int
    recent_entries: int
    monthly_entries: int
    average_severity: float
    resolution_rate: float
    most_common_pests: List[PestCount]


class FollowUpSuggestion(BaseModel):
    follow_up_date: date
    days: int
