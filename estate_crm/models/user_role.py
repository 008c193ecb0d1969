# models/user_role.py
from sqlalchemy import Column, String, ForeignKey, CheckConstraint, Index, Uuid
from sqlalchemy.orm import relationship
from uuid import uuid4
from estate_crm.db.base_class import Base

ROLES = ("admin", "agent")


class UserRole(Base):
    __tablename__ = "user_roles"

    role_id = Column(Uuid, primary_key=True, default=uuid4)
    # unique: an account holds at most one role
    user_id = Column(Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), unique=True, nullable=False)
    role = Column(String(20), nullable=False)

    __table_args__ = (
        CheckConstraint("role IN ('admin','agent')", name="chk_user_role"),
        Index("idx_user_roles_role", "role"),
    )

    user = relationship("User", back_populates="role")
