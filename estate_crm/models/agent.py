# models/agent.py
from sqlalchemy import Column, String, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from uuid import uuid4
from estate_crm.db.base_class import Base


class Agent(Base):
    __tablename__ = "agents"

    agent_id = Column(Uuid, primary_key=True, default=uuid4)
    user_id = Column(Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), unique=True, nullable=False)
    name = Column(String(200), nullable=False)
    phone = Column(String(20), nullable=True)
    email = Column(String(255), nullable=True)
    avatar_url = Column(String(500), nullable=True)

    # Relationships
    user = relationship("User", back_populates="agent")
    leads = relationship("Lead", back_populates="assigned_agent")
    lead_activities = relationship("LeadActivity", back_populates="agent")
    properties = relationship("Property", back_populates="agent")
