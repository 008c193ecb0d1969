# models/property.py
from sqlalchemy import Column, String, Integer, BigInteger, Float, Boolean, Text, ForeignKey, CheckConstraint, Index, Uuid
from sqlalchemy.orm import relationship
from uuid import uuid4
from estate_crm.db.base_class import Base, StringList

PROPERTY_TYPES = ("house", "apartment", "office", "plot")
PROPERTY_PURPOSES = ("buy", "rent")
PROPERTY_STATUSES = ("draft", "review", "published")
AREA_UNITS = ("sqft", "sqyd", "marla", "kanal")


class Property(Base):
    __tablename__ = "properties"

    property_id = Column(Uuid, primary_key=True, default=uuid4)
    title = Column(String(300), nullable=False)
    type = Column(String(20), nullable=False)
    purpose = Column(String(10), nullable=False)
    price = Column(BigInteger, nullable=False)  # PKR
    price_label = Column(String(100), nullable=True)
    area = Column(Float, nullable=False)
    area_unit = Column(String(10), nullable=False, default="sqft")
    bedrooms = Column(Integer, nullable=True)
    bathrooms = Column(Integer, nullable=True)
    parking = Column(Integer, nullable=True)
    furnished = Column(Boolean, nullable=True)
    city = Column(String(100), nullable=False, default="Karachi")
    location = Column(String(200), nullable=False)
    block = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    images = Column(StringList, nullable=False, default=list)
    features = Column(StringList, nullable=False, default=list)
    status = Column(String(20), nullable=False, default="draft")
    featured = Column(Boolean, nullable=False, default=False)
    whatsapp = Column(String(20), nullable=True)
    video_link = Column(String(500), nullable=True)
    agent_id = Column(Uuid, ForeignKey("agents.agent_id", ondelete="SET NULL"), nullable=True)

    __table_args__ = (
        CheckConstraint("type IN ('house','apartment','office','plot')", name="chk_property_type"),
        CheckConstraint("purpose IN ('buy','rent')", name="chk_property_purpose"),
        CheckConstraint("status IN ('draft','review','published')", name="chk_property_status"),
        CheckConstraint("area_unit IN ('sqft','sqyd','marla','kanal')", name="chk_property_area_unit"),
        CheckConstraint("price >= 0", name="chk_property_price"),
        Index("idx_property_status", "status"),
        Index("idx_property_purpose_type", "purpose", "type"),
    )

    agent = relationship("Agent", back_populates="properties")
