# models/user.py
from sqlalchemy import Column, String, Boolean, Uuid
from sqlalchemy.orm import relationship
from uuid import uuid4
from estate_crm.db.base_class import Base


class User(Base):
    """Authentication identity. Profile data lives on Agent, authorization on UserRole."""
    __tablename__ = "users"

    user_id = Column(Uuid, primary_key=True, default=uuid4)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    # Relationships
    agent = relationship("Agent", back_populates="user", uselist=False, cascade="all, delete-orphan")
    role = relationship("UserRole", back_populates="user", uselist=False, cascade="all, delete-orphan")
