from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from redis.asyncio import Redis
from typing import List
import logging
import traceback

from estate_crm.core.errors import AuthError
from estate_crm.core.security import require_admin, require_staff
from estate_crm.db.redis_client import get_redis
from estate_crm.db.session import get_db
from estate_crm.schemas.admin_setup import AgentCreateRequest, AgentResponse
from estate_crm.schemas.auth import SessionContext
from estate_crm.schemas.dashboard import DashboardResponse
from estate_crm.services.agent_services import AgentServices

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/agents", tags=["Agents"])


@router.get("", response_model=List[AgentResponse])
async def list_agents(
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(require_staff),
):
    try:
        return await AgentServices.list_agents_service(db)
    except Exception as e:
        logger.error("Error in list_agents: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post("", response_model=AgentResponse, status_code=201, summary="Create an agent account (admin)")
async def create_agent(
    request: AgentCreateRequest,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(require_admin),
):
    try:
        return await AgentServices.create_agent_service(request, db)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Error in create_agent: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    db: AsyncSession = Depends(get_db),
    redis: Redis = Depends(get_redis),
    ctx: SessionContext = Depends(require_staff),
):
    try:
        return await AgentServices.get_dashboard(db, redis, ctx)
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error("Error in get_dashboard: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")
