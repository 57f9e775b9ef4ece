import secrets
from typing import Optional

from fastapi import HTTPException

from sproutify.core.cache import redis_client
from sproutify.core.config import settings
from sproutify.core.logger import app_logger, db_logger
from sproutify.models.classroom import Classroom, Student
from sproutify.schemas.kiosk import KioskSession
from sproutify.services.scouting_service import utc_now


def session_key(token: str) -> str:
    return f"kiosk:{token}"


class KioskService:
    """Student sessions on a shared classroom device, kept in redis."""

    def __init__(self):
        self.redis = redis_client

    async def start(self, kiosk_pin: str, student_name: str) -> KioskSession:
        name = student_name.strip()
        if not name:
            raise HTTPException(status_code=400, detail="Please enter your name")

        classroom = await Classroom.get_or_none(kiosk_pin=kiosk_pin.strip())
        if not classroom:
            raise HTTPException(status_code=404, detail="Invalid kiosk PIN")

        now = utc_now()
        student, created = await Student.get_or_create(
            classroom_id=classroom.id,
            display_name=name,
            defaults={"first_login_at": now},
        )
        student.last_login_at = now
        await student.save(update_fields=["last_login_at"])

        if created:
            db_logger.log_create("Student", {"id": student.id, "classroom_id": classroom.id})

        session = KioskSession(
            token=secrets.token_urlsafe(32),
            student_id=student.id,
            student_name=student.display_name,
            student_classroom_id=classroom.id,
            teacher_id_for_tower=classroom.teacher_id,
            grade_level=classroom.grade_level,
            created_at=now,
        )
        await self.redis.set(
            session_key(session.token),
            session.model_dump_json(),
            ex=settings.KIOSK_SESSION_SECONDS
        )

        app_logger.info(f"Kiosk session started: student={student.id} classroom={classroom.id}")
        return session

    async def get(self, token: str) -> Optional[KioskSession]:
        if not token:
            return None
        raw = await self.redis.get(session_key(token))
        if not raw:
            return None
        return KioskSession.model_validate_json(raw)

    async def end(self, token: str) -> bool:
        removed = await self.redis.delete(session_key(token))
        app_logger.info(f"Kiosk session ended (found={bool(removed)})")
        return bool(removed)
