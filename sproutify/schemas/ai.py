from typing import List, Optional

from pydantic import BaseModel


class AIChatRequest(BaseModel):
    message: Optional[str] = None
    towerId: Optional[int] = None
    studentName: Optional[str] = None
    selectedSources: List[str] = []
    gradeLevel: Optional[str] = None


class AIChatContext(BaseModel):
    towerName: str
    sourcesUsed: int


class AIChatResponse(BaseModel):
    success: bool = True
    response: str
    context: AIChatContext
