from typing import Optional

from fastapi import APIRouter, Depends, Header

from sproutify.api.deps import get_kiosk_session
from sproutify.schemas.kiosk import KioskLoginRequest, KioskSession
from sproutify.services.kiosk_service import KioskService

router = APIRouter(prefix="/api/v1/kiosk", tags=["Kiosk"])


@router.post("/session", response_model=KioskSession)
async def start_session(req: KioskLoginRequest, service: KioskService = Depends()):
    return await service.start(req.kiosk_pin, req.student_name)


@router.get("/session", response_model=KioskSession)
async def current_session(session: KioskSession = Depends(get_kiosk_session)):
    return session


@router.delete("/session")
async def end_session(
        x_kiosk_session: Optional[str] = Header(None),
        service: KioskService = Depends(),
):
    if x_kiosk_session:
        await service.end(x_kiosk_session)
    return {"message": "Signed out"}
