from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel

SourceType = Literal["plant", "vitals", "harvest", "waste", "pest", "photo"]
OutputType = Literal["study-guide", "faq", "timeline", "audio", "report", "visualization"]


class SourceItem(BaseModel):
    id: str
    type: SourceType
    title: str
    date: datetime
    description: Optional[str] = None


class SourcesResponse(BaseModel):
    sources: List[SourceItem]
    selected: List[str]


class GeneratedOutput(BaseModel):
    id: int
    type: OutputType
    title: str
    date: datetime
    status: Literal["completed", "generating"] = "completed"
    content: Optional[str] = None
    document_type: Optional[str] = None
    milestone_type: Optional[str] = None


class CreateOutputRequest(BaseModel):
    type: OutputType


class ChatMessageOut(BaseModel):
    id: str
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime
