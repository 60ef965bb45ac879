"""
Database connection and session management.

Uses SQLAlchemy with async support (asyncpg in production, aiosqlite for
local development and tests).

The engine and session factory live on a `Database` object that the
application factory builds and stores on `app.state`; request handlers reach
it through the `get_db` dependency.
"""

import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from app.core.config import Settings

logger = logging.getLogger(__name__)

# Base class for all models
Base = declarative_base()


class Database:
    """
    Storage context: one async engine plus its session factory.

    Usage:
        database = Database(settings)
        await database.create_tables()
        async with database.session() as session:
            ...
        await database.dispose()
    """

    def __init__(self, settings: Settings):
        self.url = settings.DATABASE_URL

        engine_options = {"echo": settings.DEBUG and not settings.is_sqlite}
        if not settings.is_sqlite:
            engine_options.update(
                pool_pre_ping=True,
                pool_size=10,
                max_overflow=20,
            )

        self.engine: AsyncEngine = create_async_engine(self.url, **engine_options)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    def session(self) -> AsyncSession:
        """Open a new session (use as an async context manager)."""
        return self.session_factory()

    async def create_tables(self) -> None:
        """
        Create all tables that do not exist yet.

        Importing app.models registers every mapped class on Base.metadata.
        """
        import app.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> None:
        """Run a trivial query; raises if the database is unreachable."""
        async with self.session() as session:
            result = await session.execute(text("SELECT 1"))
            result.scalar()

    async def dispose(self) -> None:
        """Close database connections gracefully."""
        await self.engine.dispose()


def get_database(request: Request) -> Database:
    """FastAPI dependency returning the application's storage context."""
    return request.app.state.database


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for database sessions.

    Commits when the handler returns normally, rolls back on any exception.

    Usage:
        @router.get("/emails")
        async def list_emails(db: AsyncSession = Depends(get_db)):
            result = await db.execute(select(Email))
            return result.scalars().all()
    """
    database = get_database(request)
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
