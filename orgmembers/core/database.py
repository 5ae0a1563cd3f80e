"""
Database connection and session management.

The engine services never reach for a global session: they are handed the
session factory of a DatabaseSessionManager explicitly.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from orgmembers.core.config import Settings
from orgmembers.core.exceptions import StorageError
from orgmembers.models.base import Base

logger = logging.getLogger(__name__)


class DatabaseSessionManager:
    """Owns the async engine and the session factory built on top of it."""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> DatabaseSessionManager:
        kwargs: dict = {"echo": settings.DB_ECHO, "pool_pre_ping": True}
        if not settings.DATABASE_URL.startswith("sqlite"):
            kwargs["pool_size"] = settings.DB_POOL_SIZE
            kwargs["max_overflow"] = settings.DB_MAX_OVERFLOW
        return cls(create_async_engine(settings.DATABASE_URL, **kwargs))

    async def create_all(self) -> None:
        """Create all tables (development and tests only, use migrations in production)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def health_check(self) -> bool:
        try:
            async with self.session_factory() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as exc:
            logger.error("DB health check failed: %s", exc)
            return False

    async def close(self) -> None:
        await self.engine.dispose()


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """
    Wrap any SQLAlchemy failure raised inside the block as a StorageError.

    Domain errors and cancellation pass through untouched, so an enclosing
    session.begin() still rolls the transaction back.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("%s failed: %s", operation, exc)
        raise StorageError(operation, exc) from exc
