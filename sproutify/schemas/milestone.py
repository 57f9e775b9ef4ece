from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class MilestoneType(str, Enum):
    PLANTING = "planting"
    HARVEST = "harvest"
    OBSERVATION = "observation"
    ACHIEVEMENT = "achievement"
    LEARNING = "learning"
    CUSTOM = "custom"


class MilestoneCreate(BaseModel):
    classroom_id: int
    title: str = Field(min_length=1)
    description: Optional[str] = None
    milestone_type: MilestoneType = MilestoneType.PLANTING
    content: Optional[str] = None


class MilestoneUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    milestone_type: Optional[MilestoneType] = None
    content: Optional[str] = None


class MilestoneOut(BaseModel):
    id: int
    classroom_id: Optional[int] = None
    classroom_name: Optional[str] = None
    teacher_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    milestone_type: MilestoneType
    output_type: str
    content: Optional[str] = None
    file_name: Optional[str] = None
    file_url: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
