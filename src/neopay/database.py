"""Database connection and session management."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)


class Database:
    """Owns the engine and session factory for one application instance.

    Constructed explicitly and handed to the app factory, so tests can swap
    in a different engine without touching module state.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_url(cls, database_url: str) -> Database:
        """Create a database handle from a SQLAlchemy URL."""
        kwargs: dict = {"echo": False, "pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            kwargs.update(pool_size=10, max_overflow=20)
        return cls(create_async_engine(database_url, **kwargs))

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get a session that commits on success and rolls back on error."""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def create_all(self) -> None:
        """Create all tables. Used by tests and local development."""
        from neopay.models import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()
