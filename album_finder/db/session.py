# ============================================================================
# FILE: album_finder/db/session.py
# Async engine / connection pool handle, owned by the application lifespan
# ============================================================================
from typing import AsyncIterator, Optional
from datetime import datetime
from fastapi import Request
from sqlalchemy import select, func
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from album_finder.config import Settings
from album_finder.db.base import Base, import_models
import logging

logger = logging.getLogger(__name__)

class Database:
    """
    Explicit store handle: one engine with a bounded connection pool and a
    session factory. Created at startup, disposed at shutdown.
    """

    def __init__(self, settings: Settings):
        url = make_url(settings.DATABASE_URL)
        engine_kwargs = {"echo": settings.DB_ECHO, "pool_pre_ping": True}

        # SQLite (tests, local runs) does not take queue pool sizing
        if url.get_backend_name() != "sqlite":
            engine_kwargs.update(
                pool_size=settings.DB_POOL_SIZE,
                max_overflow=settings.DB_MAX_OVERFLOW,
                pool_timeout=settings.DB_POOL_TIMEOUT,
            )

        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def create_all(self) -> None:
        """Create tables that do not exist yet"""
        import_models()
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ready")

    async def now(self) -> Optional[datetime]:
        """Ask the store for its clock; raises if the store is unreachable"""
        async with self.session_factory() as session:
            result = await session.execute(select(func.now()))
            return result.scalar_one()

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database connections closed")


def get_database(request: Request) -> Database:
    return request.app.state.db


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency: one session per request, closed when the request ends"""
    async with get_database(request).session_factory() as session:
        yield session
