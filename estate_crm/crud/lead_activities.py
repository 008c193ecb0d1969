# crud/lead_activities.py
from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from estate_crm.models.lead_activities import LeadActivity


# Append an activity; the caller owns the commit
async def create_activity(
    db: AsyncSession,
    lead_id: UUID,
    activity_type: str,
    description: str,
    agent_id: Optional[UUID] = None,
) -> LeadActivity:
    activity = LeadActivity(
        lead_id=lead_id,
        agent_id=agent_id,
        activity_type=activity_type,
        description=description,
    )
    db.add(activity)
    await db.flush()
    return activity


# List all activities for a lead, newest first
async def get_activities_by_lead(db: AsyncSession, lead_id: UUID) -> List[LeadActivity]:
    result = await db.execute(
        select(LeadActivity)
        .where(LeadActivity.lead_id == lead_id)
        .order_by(LeadActivity.created_at.desc())
    )
    return list(result.scalars().all())
