from typing import List, Optional
from pydantic import BaseModel
from uuid import UUID
from datetime import datetime

from estate_crm.schemas.lead import PipelineStageCount


class DashboardSummary(BaseModel):
    published_listings: int
    total_leads: int
    won_leads: int
    hot_leads: int  # new + contacted
    conversion_rate: float  # percent of leads won


class RecentLeadItem(BaseModel):
    lead_id: UUID
    name: str
    mobile: str
    source: str
    status: str
    created_at: datetime


class AgentPerformanceItem(BaseModel):
    agent_id: UUID
    name: str
    total_leads: int
    active_leads: int
    won_leads: int


class DashboardResponse(BaseModel):
    summary: DashboardSummary
    pipeline: List[PipelineStageCount]
    recent_leads: List[RecentLeadItem]
    agent_performance: List[AgentPerformanceItem]
    cached_at: Optional[datetime] = None
