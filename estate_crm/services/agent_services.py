from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime, timezone
from typing import List
import json
import logging

from estate_crm.core import config
from estate_crm.core.security import agent_scope
from estate_crm.crud import agent as crud_agent
from estate_crm.crud import lead as crud_lead
from estate_crm.crud import property as crud_property
from estate_crm.schemas.admin_setup import AgentCreateRequest, AgentResponse
from estate_crm.schemas.auth import SessionContext
from estate_crm.schemas.dashboard import (
    AgentPerformanceItem,
    DashboardResponse,
    DashboardSummary,
    RecentLeadItem,
)
from estate_crm.services import lead_pipeline
from estate_crm.services.admin_bootstrap import create_staff_account, validate_account_fields

logger = logging.getLogger(__name__)


class AgentServices:
    """
        Agent accounts and the CRM dashboard.

        Methods:
            list_agents_service(db): every agent profile, by name.
            create_agent_service(request, db): admin creates a staff account with
                the `agent` role (identity + profile + role in one transaction).
            get_dashboard(db, redis, ctx): headline numbers, pipeline counts, the
                five newest leads and a per-agent performance table. Admins get the
                whole agency, agents only their own leads. Cached in Redis per scope
                for DASHBOARD_CACHE_SECONDS.
    """

    @staticmethod
    async def list_agents_service(db: AsyncSession) -> List[AgentResponse]:
        return [AgentResponse.model_validate(a) for a in await crud_agent.list_agents(db)]

    @staticmethod
    async def create_agent_service(request: AgentCreateRequest, db: AsyncSession) -> AgentResponse:
        email, password, name = validate_account_fields(request.email, request.password, request.name)
        _, agent = await create_staff_account(db, email, password, name, role="agent", phone=request.phone)
        logger.info("Agent %s created", agent.agent_id)
        return AgentResponse.model_validate(agent)

    @staticmethod
    async def get_dashboard(db: AsyncSession, redis, ctx: SessionContext) -> DashboardResponse:
        scope = agent_scope(ctx)
        cache_key = f"dashboard:{scope or 'all'}"

        # 1. --- Checking Redis cache ---
        cached = await redis.get(cache_key)
        if cached:
            return DashboardResponse(**json.loads(cached))

        # 2. --- Pipeline + summary ---
        counts = await crud_lead.count_by_status(db, agent_scope=scope)
        total = sum(counts.values())
        won = counts.get("won", 0)
        property_counts = await crud_property.count_by_status(db)

        summary = DashboardSummary(
            published_listings=property_counts.get("published", 0),
            total_leads=total,
            won_leads=won,
            hot_leads=counts.get("new", 0) + counts.get("contacted", 0),
            conversion_rate=round(won / total * 100, 1) if total else 0.0,
        )

        # 3. --- Recent leads (last 5) ---
        recent = await crud_lead.list_leads(db, agent_scope=scope, limit=5)
        recent_leads = [
            RecentLeadItem(
                lead_id=lead.lead_id,
                name=lead.name,
                mobile=lead.mobile,
                source=lead.source,
                status=lead.status,
                created_at=lead.created_at,
            )
            for lead in recent
        ]

        # 4. --- Agent performance ---
        rows = await crud_agent.get_agent_performance(db, agent_scope=scope)
        agent_performance = [AgentPerformanceItem(**row) for row in rows]

        response_obj = DashboardResponse(
            summary=summary,
            pipeline=lead_pipeline.pipeline_counts(counts),
            recent_leads=recent_leads,
            agent_performance=agent_performance,
            cached_at=datetime.now(timezone.utc),
        )

        await redis.set(cache_key, response_obj.model_dump_json(), ex=config.DASHBOARD_CACHE_SECONDS)
        return response_obj
