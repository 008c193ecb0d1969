from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
import logging
import traceback

from estate_crm.db.redis_client import get_redis
from estate_crm.db.session import get_db
from estate_crm.schemas.chat import ChatTurnRequest, ChatTurnResponse
from estate_crm.services.ai_chat import get_ai_client
from estate_crm.services.chat_capture import ChatCaptureService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/chat", tags=["Chat"])


@router.post(
    "/messages",
    response_model=ChatTurnResponse,
    summary="Send a message to the website chat assistant",
    description="Runs the lead-capture dialogue (chat -> capture_name -> capture_mobile -> done); "
                "other messages are answered by the AI responder."
)
async def post_message(
    request: ChatTurnRequest,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis),
    ai_client=Depends(get_ai_client),
):
    try:
        return await ChatCaptureService.handle_message(request, db, redis, ai_client)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Error in post_message: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")
