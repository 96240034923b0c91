"""
Database engine and session management
Async SQLAlchemy over aiosqlite (default) or asyncpg
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool
from typing import AsyncGenerator, Optional
import logging

from .config import settings
from dealcart.models.base import Base

logger = logging.getLogger(__name__)

def create_db_engine(url: str, echo: bool = False) -> AsyncEngine:
    """
    Build an async engine for the given URL

    SQLite gets no pooling, except in-memory databases which must keep
    their single connection alive. Other backends use the configured pool.
    """
    if url.startswith("sqlite"):
        if ":memory:" in url:
            return create_async_engine(
                url,
                echo=echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return create_async_engine(url, echo=echo, poolclass=NullPool)

    return create_async_engine(
        url,
        echo=echo,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_timeout=settings.DATABASE_POOL_TIMEOUT,
        pool_pre_ping=True,  # Verify connections before use
    )

def create_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    """Session factory with the settings every request session uses"""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

engine = create_db_engine(settings.database_url_async, echo=settings.DATABASE_ECHO)
AsyncSessionLocal = create_session_factory(engine)

# Database dependency
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a request-scoped session

    Commits when the request succeeds, rolls back and re-raises otherwise.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

async def init_db(bind: Optional[AsyncEngine] = None) -> None:
    """Create every table registered on the metadata"""
    # Import models so every table is registered on the metadata
    import dealcart.models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created successfully")

async def close_db() -> None:
    """Close database connections"""
    await engine.dispose()
    logger.info("Database connections closed")
