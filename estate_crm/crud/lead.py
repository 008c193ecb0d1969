# crud/lead.py
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func, or_
from uuid import UUID

from estate_crm.db.base_class import utcnow
from estate_crm.models import Lead, LeadActivity


def _scoped(stmt, agent_scope: Optional[UUID]):
    """Restrict to one agent's leads; None means unrestricted (admin view)."""
    if agent_scope is not None:
        stmt = stmt.where(Lead.assigned_agent_id == agent_scope)
    return stmt


# --- Insert Lead ---
async def create_lead(db: AsyncSession, lead_data: dict) -> Lead:
    new_lead = Lead(**lead_data)
    db.add(new_lead)
    await db.flush()
    return new_lead


# --- Fetch Lead by ID ---
async def get_lead_by_id(db: AsyncSession, lead_id: UUID, agent_scope: Optional[UUID] = None) -> Lead | None:
    stmt = _scoped(select(Lead).where(Lead.lead_id == lead_id), agent_scope)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


# --- Filtered listing (newest first) ---
async def list_leads(
    db: AsyncSession,
    search: Optional[str] = None,
    status: Optional[str] = None,
    agent_scope: Optional[UUID] = None,
    limit: Optional[int] = None,
) -> List[Lead]:
    stmt = _scoped(select(Lead), agent_scope)

    if search:
        term = search.strip()
        digits = term.replace(" ", "").replace("-", "")
        stmt = stmt.where(
            or_(
                func.lower(Lead.name).contains(term.lower()),
                Lead.mobile.contains(digits or term),
            )
        )
    if status:
        stmt = stmt.where(Lead.status == status)

    stmt = stmt.order_by(Lead.created_at.desc())
    if limit:
        stmt = stmt.limit(limit)

    result = await db.execute(stmt)
    return list(result.scalars().all())


# --- Count per pipeline stage ---
async def count_by_status(db: AsyncSession, agent_scope: Optional[UUID] = None) -> dict[str, int]:
    stmt = _scoped(select(Lead.status, func.count(Lead.lead_id)), agent_scope).group_by(Lead.status)
    result = await db.execute(stmt)
    return {status: count for status, count in result.all()}


# --- Field edits ---
def apply_lead_fields(lead: Lead, fields: dict) -> Lead:
    for key, value in fields.items():
        setattr(lead, key, value)
    lead.updated_at = utcnow()
    return lead


# --- Update Lead Status ---
def update_lead_status(lead: Lead, new_status: str) -> Lead:
    lead.status = new_status
    lead.updated_at = utcnow()
    return lead


# --- Delete Lead (activities go with it) ---
async def delete_lead(db: AsyncSession, lead_id: UUID) -> bool:
    await db.execute(delete(LeadActivity).where(LeadActivity.lead_id == lead_id))
    result = await db.execute(delete(Lead).where(Lead.lead_id == lead_id))
    return result.rowcount > 0
