from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from sproutify.api.deps import verify_ai_token
from sproutify.core.logger import ai_logger
from sproutify.schemas.ai import AIChatRequest
from sproutify.services.ai_service import AIRequestError, AIService

router = APIRouter(prefix="/api/v1/ai", tags=["AI"])


@router.post("/chat", dependencies=[Depends(verify_ai_token)])
async def ai_chat(req: AIChatRequest):
    try:
        result = await AIService.chat(req)
    except AIRequestError as e:
        return JSONResponse(status_code=400, content={"success": False, "error": str(e)})
    except Exception as e:
        ai_logger.log_error(f"ai_chat tower={req.towerId}", e)
        return JSONResponse(status_code=500, content={"success": False, "error": str(e) or "Internal server error"})

    return result.model_dump()
