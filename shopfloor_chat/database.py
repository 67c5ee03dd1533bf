"""Database configuration and connection management."""

from datetime import datetime, timezone
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from shopfloor_chat.config import DATABASE_URL, SQL_DEBUG


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""

    pass


def utcnow() -> datetime:
    """Timezone-aware current time used for every persisted timestamp."""
    return datetime.now(timezone.utc)


# Create async engine
engine = create_async_engine(DATABASE_URL, echo=SQL_DEBUG, future=True)

# Create session factory
AsyncSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db() -> None:
    """Initialize database connection on startup."""
    # Schema is managed by alembic; nothing to do here yet
    pass


async def close_db() -> None:
    """Close database connections on shutdown."""
    await engine.dispose()
