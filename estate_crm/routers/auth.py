from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
import logging
import traceback

from estate_crm.core.errors import AuthError
from estate_crm.core.security import get_session_context, security
from estate_crm.db.redis_client import get_redis
from estate_crm.db.session import get_db
from estate_crm.schemas.auth import LoginRequest, LoginResponse, LogoutResponse, SessionContext
from estate_crm.services.auth_services import AuthServices

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])


@router.post("/login", response_model=LoginResponse, summary="Sign in with email and password")
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    try:
        return await AuthServices.login_service(request, db)
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error("Error in login: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.get("/me", response_model=SessionContext, summary="Current session context")
async def me(ctx: SessionContext = Depends(get_session_context)):
    return ctx


@router.post("/logout", response_model=LogoutResponse, summary="Sign out and revoke the token")
async def logout(
    ctx: SessionContext = Depends(get_session_context),
    credentials: HTTPAuthorizationCredentials = Depends(security),
    redis=Depends(get_redis),
):
    try:
        await AuthServices.logout_service(ctx, credentials.credentials, redis)
        return LogoutResponse(success=True)
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error("Error in logout: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")
