# db/base_class.py
from datetime import datetime, timezone
from sqlalchemy import ARRAY, JSON, Column, DateTime, String
from sqlalchemy.orm import declarative_base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Postgres text[]; SQLite has no arrays so fall back to a JSON list
StringList = ARRAY(String).with_variant(JSON(), "sqlite")


class TimestampMixin:
    """created_at / updated_at on every table, stored in UTC."""
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


Base = declarative_base(cls=TimestampMixin)
