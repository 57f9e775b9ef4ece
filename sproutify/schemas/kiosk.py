from datetime import datetime

from pydantic import BaseModel, Field


class KioskLoginRequest(BaseModel):
    kiosk_pin: str = Field(min_length=1)
    student_name: str = Field(min_length=1, max_length=100)


class KioskSession(BaseModel):
    token: str
    student_id: int
    student_name: str
    student_classroom_id: int
    teacher_id_for_tower: int
    grade_level: str = "3-5"
    created_at: datetime
