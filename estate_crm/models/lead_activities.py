# models/lead_activities.py
from sqlalchemy import Column, String, Text, ForeignKey, Index, CheckConstraint, Uuid
from sqlalchemy.orm import relationship
from uuid import uuid4
from estate_crm.db.base_class import Base

ACTIVITY_TYPES = ("note", "status_change", "assignment")


class LeadActivity(Base):
    """Append-only event log for a lead. Rows are never updated."""
    __tablename__ = "lead_activities"

    activity_id = Column(Uuid, primary_key=True, default=uuid4)
    lead_id = Column(Uuid, ForeignKey("leads.lead_id", ondelete="CASCADE"), nullable=False)
    agent_id = Column(Uuid, ForeignKey("agents.agent_id", ondelete="SET NULL"), nullable=True)
    activity_type = Column(String(30), nullable=False)
    description = Column(Text, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "activity_type IN ('note','status_change','assignment')",
            name="chk_activity_type"
        ),
        Index("idx_activity_lead", "lead_id"),
        Index("idx_activity_time", "created_at"),
    )

    # Relationships
    lead = relationship("Lead", back_populates="activities")
    agent = relationship("Agent", back_populates="lead_activities")
