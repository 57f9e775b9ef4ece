from typing import List, Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError

from sproutify.core.security import decode_access_token, verify_service_token
from sproutify.models.profile import Profile
from sproutify.models.tower import Tower
from sproutify.schemas.kiosk import KioskSession
from sproutify.services.kiosk_service import KioskService

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


async def profile_from_token(token: str) -> Profile:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
        profile_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise credentials_exception

    profile = await Profile.get_or_none(id=profile_id, is_active=True)
    if profile is None:
        raise credentials_exception
    return profile


async def get_current_teacher(credentials: HTTPAuthorizationCredentials = Depends(security)) -> Profile:
    return await profile_from_token(credentials.credentials)


def require_role(allowed_roles: List[str]):
    async def role_checker(
            current_teacher: Profile = Depends(get_current_teacher)
    ) -> Profile:
        if current_teacher.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required roles: {', '.join(allowed_roles)}"
            )
        return current_teacher

    return role_checker


async def get_kiosk_session(
        x_kiosk_session: Optional[str] = Header(None),
        service: KioskService = Depends(),
) -> KioskSession:
    session = await service.get(x_kiosk_session)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Kiosk session expired. Please sign in again."
        )
    return session


async def verify_ai_token(credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security)):
    if credentials is None or not verify_service_token(credentials.credentials):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid service token")


class TowerActor:
    """Whoever is writing to a tower: its teacher or a kiosk student."""

    def __init__(self, teacher: Profile = None, kiosk: KioskSession = None):
        self.teacher = teacher
        self.kiosk = kiosk

    @property
    def teacher_id(self) -> Optional[int]:
        if self.teacher:
            return self.teacher.id
        return self.kiosk.teacher_id_for_tower

    @property
    def student_name(self) -> Optional[str]:
        return self.kiosk.student_name if self.kiosk else None

    def can_write(self, tower: Tower) -> bool:
        if self.teacher:
            return self.teacher.can_manage_tower(tower)
        return tower.teacher_id == self.kiosk.teacher_id_for_tower


async def get_tower_actor(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
        x_kiosk_session: Optional[str] = Header(None),
        service: KioskService = Depends(),
) -> TowerActor:
    if credentials is not None:
        return TowerActor(teacher=await profile_from_token(credentials.credentials))

    session = await service.get(x_kiosk_session)
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not signed in")
    return TowerActor(kiosk=session)


async def get_writable_tower(tower_id: int, actor: TowerActor = Depends(get_tower_actor)) -> Tower:
    tower = await Tower.get_or_none(id=tower_id)
    if not tower:
        raise HTTPException(status_code=404, detail="Tower not found")
    if not actor.can_write(tower):
        raise HTTPException(status_code=403, detail="You don't have access to this tower")
    return tower
