"""Database connection and session management."""
import logging
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from smartorder.core.config import settings
from smartorder.db.models import Base

logger = logging.getLogger(__name__)


def to_async_url(url: str) -> str:
    """Convert a plain database URL to its async driver form."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


engine = create_async_engine(
    to_async_url(settings.database_url),
    echo=False,
    future=True,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def init_db() -> None:
    """Initialize database tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"[DB] Tables ready: {', '.join(sorted(Base.metadata.tables))}")


async def get_db() -> AsyncSession:
    """Request-scoped session. Services commit their own writes."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
