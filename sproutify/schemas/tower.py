from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from sproutify.models.tower import TowerLocation


class TowerCreate(BaseModel):
    name: str = Field(min_length=1)
    ports: int = Field(default=28, gt=0)
    location: TowerLocation = TowerLocation.INDOOR


class TowerOut(BaseModel):
    id: int
    name: str
    ports: int
    location: TowerLocation
    teacher_id: int
    created_at: datetime

    class Config:
        from_attributes = True


class VitalsCreate(BaseModel):
    ph: Optional[float] = Field(default=None, ge=0, le=14)
    ec: Optional[float] = Field(default=None, ge=0)


class HarvestCreate(BaseModel):
    plant_name: Optional[str] = None
    weight_grams: float = Field(ge=0)
    destination: Optional[str] = None


class WasteCreate(BaseModel):
    plant_name: Optional[str] = None
    grams: float = Field(ge=0)
    notes: Optional[str] = None


class PhotoCreate(BaseModel):
    file_url: str
    caption: Optional[str] = None
