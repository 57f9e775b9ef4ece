"""Tests for request authentication helpers."""

from datetime import datetime

import pytest
from fastapi import HTTPException
from jose import jwt

from sproutify.api.deps import TowerActor, profile_from_token, require_role
from sproutify.core.security import create_access_token, verify_service_token
from sproutify.core.config import settings
from sproutify.schemas.kiosk import KioskSession


def kiosk_for(teacher_id: int) -> KioskSession:
    return KioskSession(
        token="t",
        student_id=1,
        student_name="Ava",
        student_classroom_id=1,
        teacher_id_for_tower=teacher_id,
        created_at=datetime(2024, 5, 1),
    )


class TestTeacherToken:
    """Tests for bearer JWT resolution."""

    @pytest.mark.asyncio
    async def test_valid_token(self, teacher) -> None:
        """A token for an active profile resolves to it."""
        profile = await profile_from_token(create_access_token(teacher.id))
        assert profile.id == teacher.id

    @pytest.mark.asyncio
    async def test_garbage_token(self, db) -> None:
        """Undecodable tokens are a 401."""
        with pytest.raises(HTTPException) as exc:
            await profile_from_token("not-a-jwt")
        assert exc.value.status_code == 401

    @pytest.mark.asyncio
    async def test_non_numeric_subject(self, db) -> None:
        """A signed token whose subject is not an id is a 401."""
        for payload in ({"sub": "abc"}, {"exp": 4102444800}):
            token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
            with pytest.raises(HTTPException) as exc:
                await profile_from_token(token)
            assert exc.value.status_code == 401

    @pytest.mark.asyncio
    async def test_inactive_profile(self, teacher) -> None:
        """Deactivated profiles cannot sign in."""
        teacher.is_active = False
        await teacher.save()
        with pytest.raises(HTTPException):
            await profile_from_token(create_access_token(teacher.id))

    @pytest.mark.asyncio
    async def test_require_role(self, teacher) -> None:
        """Teachers are kept out of admin routes."""
        checker = require_role(["super_admin"])
        with pytest.raises(HTTPException) as exc:
            await checker(current_teacher=teacher)
        assert exc.value.status_code == 403

        teacher.role = "super_admin"
        assert await checker(current_teacher=teacher) is teacher


class TestTowerActor:
    """Tests for tower write access."""

    @pytest.mark.asyncio
    async def test_teacher_access(self, teacher, other_teacher, tower) -> None:
        """Teachers write to their own towers only."""
        assert TowerActor(teacher=teacher).can_write(tower)
        assert not TowerActor(teacher=other_teacher).can_write(tower)

    @pytest.mark.asyncio
    async def test_kiosk_access(self, teacher, other_teacher, tower) -> None:
        """Students write to their classroom teacher's towers."""
        actor = TowerActor(kiosk=kiosk_for(teacher.id))
        assert actor.can_write(tower)
        assert actor.teacher_id == teacher.id
        assert actor.student_name == "Ava"
        assert not TowerActor(kiosk=kiosk_for(other_teacher.id)).can_write(tower)


def test_service_token() -> None:
    """Only the configured inference token is accepted."""
    assert verify_service_token(settings.AI_CHAT_TOKEN)
    assert not verify_service_token("wrong")
    assert not verify_service_token(None)
    assert not verify_service_token("t\u00f6ken")
