# crud/agent.py
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from uuid import UUID

from estate_crm.models import Agent, Lead, User, UserRole


# --- Identities ---
async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


async def get_user_by_id(db: AsyncSession, user_id: UUID) -> User | None:
    result = await db.execute(select(User).where(User.user_id == user_id))
    return result.scalar_one_or_none()


async def create_user(db: AsyncSession, email: str, password_hash: str) -> User:
    user = User(email=email.lower(), password_hash=password_hash)
    db.add(user)
    await db.flush()
    return user


# --- Agent profiles ---
async def create_agent(db: AsyncSession, user_id: UUID, name: str, email: str, phone: Optional[str] = None) -> Agent:
    agent = Agent(user_id=user_id, name=name, email=email, phone=phone)
    db.add(agent)
    await db.flush()
    return agent


async def get_agent_by_id(db: AsyncSession, agent_id: UUID) -> Agent | None:
    result = await db.execute(select(Agent).where(Agent.agent_id == agent_id))
    return result.scalar_one_or_none()


async def get_agent_for_user(db: AsyncSession, user_id: UUID) -> Agent | None:
    result = await db.execute(select(Agent).where(Agent.user_id == user_id))
    return result.scalar_one_or_none()


async def list_agents(db: AsyncSession) -> List[Agent]:
    result = await db.execute(select(Agent).order_by(Agent.name))
    return list(result.scalars().all())


# --- Roles ---
async def create_role(db: AsyncSession, user_id: UUID, role: str) -> UserRole:
    user_role = UserRole(user_id=user_id, role=role)
    db.add(user_role)
    await db.flush()
    return user_role


async def get_role_for_user(db: AsyncSession, user_id: UUID) -> str | None:
    result = await db.execute(select(UserRole.role).where(UserRole.user_id == user_id))
    return result.scalar_one_or_none()


async def admin_exists(db: AsyncSession) -> bool:
    result = await db.execute(select(UserRole.role_id).where(UserRole.role == "admin").limit(1))
    return result.first() is not None


# --- Performance table for the dashboard ---
async def get_agent_performance(db: AsyncSession, agent_scope: Optional[UUID] = None):
    """Per-agent lead totals: all assigned, still open, and won."""
    query = (
        select(
            Agent.agent_id,
            Agent.name,
            func.count(Lead.lead_id).label("total_leads"),
            func.count(Lead.lead_id).filter(Lead.status.notin_(["won", "lost"])).label("active_leads"),
            func.count(Lead.lead_id).filter(Lead.status == "won").label("won_leads"),
        )
        .outerjoin(Lead, Lead.assigned_agent_id == Agent.agent_id)
        .group_by(Agent.agent_id, Agent.name)
        .order_by(Agent.name)
    )
    if agent_scope is not None:
        query = query.where(Agent.agent_id == agent_scope)

    result = await db.execute(query)
    return result.mappings().all()
