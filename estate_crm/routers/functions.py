from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
import logging
import traceback

from estate_crm.core.errors import AuthError
from estate_crm.db.redis_client import get_redis
from estate_crm.db.session import get_db
from estate_crm.schemas.admin_setup import CreateAdminRequest, CreateAdminResponse
from estate_crm.schemas.chat import AIChatRequest, AIChatResponse
from estate_crm.services.admin_bootstrap import AdminBootstrapService
from estate_crm.services.ai_chat import AIChatService, FALLBACK_REPLY, get_ai_client

logger = logging.getLogger(__name__)

# Serverless-style function endpoints; errors are returned as {"error": ...}
router = APIRouter(prefix="/functions/v1", tags=["Functions"])


@router.post("/ai-chat", response_model=AIChatResponse, summary="AI property assistant")
async def ai_chat(
    request: AIChatRequest,
    ai_client=Depends(get_ai_client),
):
    try:
        messages = [m.model_dump() for m in request.messages]
        return AIChatResponse(reply=await AIChatService.reply_or_fallback(messages, ai_client))
    except Exception as e:
        logger.error("AI chat error: %s\n%s", e, traceback.format_exc())
        return AIChatResponse(reply=FALLBACK_REPLY)


@router.post(
    "/create-admin",
    response_model=CreateAdminResponse,
    summary="Bootstrap an administrator account",
    description='setupKey "FIRST_RUN" works only while no admin exists; otherwise it must match ADMIN_SETUP_KEY.'
)
async def create_admin(
    request: CreateAdminRequest,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis),
):
    try:
        return await AdminBootstrapService.create_admin_service(request, db, redis)
    except AuthError as e:
        return JSONResponse(status_code=e.status_code, content={"error": str(e)})
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    except Exception as e:
        logger.error("Error in create_admin: %s\n%s", e, traceback.format_exc())
        return JSONResponse(status_code=500, content={"error": str(e) or "Unknown error"})
