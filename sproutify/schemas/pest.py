from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class TreatmentOption(BaseModel):
    method: str
    safe_for_schools: bool = False
    effectiveness: Optional[str] = ""
    location_suitable: List[str] = Field(default_factory=list)
    instructions: str = ""
    materials: Optional[List[str]] = None
    precautions: Optional[List[str]] = None


class PestCatalogOut(BaseModel):
    id: int
    name: str
    scientific_name: Optional[str] = None
    type: str
    description: str = ""
    identification_tips: List[Any] = []
    symptoms: List[Any] = []
    severity_levels: List[Dict[str, Any]] = []
    treatment_options: List[TreatmentOption] = []
    prevention_tips: List[Any] = []
    safe_for_schools: bool
    common_locations: List[str] = []


class PestCatalogCreate(BaseModel):
    name: str = Field(min_length=1)
    scientific_name: Optional[str] = None
    type: str = "pest"
    description: str = ""
    identification_tips: List[str] = []
    symptoms: List[str] = []
    severity_levels: List[Dict[str, Any]] = []
    treatment_options: List[TreatmentOption] = []
    prevention_tips: List[str] = []
    safe_for_schools: bool = False
    common_locations: List[str] = []
