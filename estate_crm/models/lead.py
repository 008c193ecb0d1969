# models/lead.py
from sqlalchemy import Column, String, BigInteger, Boolean, Text, ForeignKey, CheckConstraint, Index, Uuid
from sqlalchemy.orm import relationship
from uuid import uuid4
from estate_crm.db.base_class import Base, StringList

# Ordered pipeline stages
LEAD_STATUSES = ("new", "contacted", "qualified", "site-visit", "negotiation", "won", "lost")
LEAD_SOURCES = ("website", "call", "whatsapp", "walk-in", "referral", "social")
NAME_MAX_LENGTH = 200


class Lead(Base):
    __tablename__ = "leads"

    lead_id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(NAME_MAX_LENGTH), nullable=False)
    mobile = Column(String(20), nullable=False)
    email = Column(String(255), nullable=True)
    whatsapp_opt_in = Column(Boolean, nullable=False, default=False)
    preferred_contact_time = Column(String(50), nullable=True)
    interest_types = Column(StringList, nullable=False, default=list)
    locations = Column(StringList, nullable=False, default=list)
    intentions = Column(StringList, nullable=False, default=list)
    budget_min = Column(BigInteger, nullable=True)
    budget_max = Column(BigInteger, nullable=True)
    budget_flexible = Column(Boolean, nullable=False, default=False)
    source = Column(String(20), nullable=False, default="website")
    status = Column(String(20), nullable=False, default="new")
    assigned_agent_id = Column(Uuid, ForeignKey("agents.agent_id", ondelete="SET NULL"), nullable=True)
    notes = Column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('new','contacted','qualified','site-visit','negotiation','won','lost')",
            name="chk_lead_status"
        ),
        CheckConstraint(
            "source IN ('website','call','whatsapp','walk-in','referral','social')",
            name="chk_lead_source"
        ),
        Index("idx_lead_status", "status"),
        Index("idx_lead_agent", "assigned_agent_id"),
        Index("idx_lead_created", "created_at"),
    )

    # Relationships
    assigned_agent = relationship("Agent", back_populates="leads")
    activities = relationship(
        "LeadActivity",
        back_populates="lead",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
