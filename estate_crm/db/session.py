# db/session.py
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from typing import AsyncGenerator
import logging

from estate_crm.core import config
from estate_crm.db.base_class import Base

logger = logging.getLogger(__name__)

# Async engine
engine = create_async_engine(
    config.DATABASE_URL,
    echo=config.SQL_ECHO,
    future=True
)

# Async session factory
async_session = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# Dependency for FastAPI
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        yield session


async def init_db() -> None:
    """Create any missing tables. Models must be imported so they register on Base."""
    import estate_crm.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ready")
