"""
Database Connection Module
Owns the SQLAlchemy async engine and session factory for one application.

The ``Database`` handle is created by the application factory and passed to
the services that need it; nothing in the package reaches for a module-level
pool.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from order_desk.core.config import Settings

logger = logging.getLogger(__name__)


# Base class for all our models
class Base(DeclarativeBase):
    pass


class Database:
    """
    Store handle: one engine (connection pool) and its session factory.

    The pool bounds how many order transactions can be in flight at once.
    Each session handed out is owned by a single request.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_maker = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False  # Objects remain accessible after commit
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """Build the engine from the configured URL and pool limits."""
        url = make_url(settings.database_url)
        options = {"echo": settings.database_echo}
        # SQLite uses a static/single-thread pool without size limits
        if not url.get_backend_name().startswith("sqlite"):
            options["pool_size"] = settings.database_pool_size
            options["max_overflow"] = settings.database_max_overflow
            options["pool_pre_ping"] = True
        logger.debug(f"Creating engine for {url.render_as_string(hide_password=True)}")
        return cls(create_async_engine(url, **options))

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session; its connection is released on every exit path."""
        async with self.session_maker() as session:
            yield session

    async def init_models(self) -> None:
        """
        Create all tables in database.
        Called once at application startup.
        """
        # Import models so their tables are registered on Base.metadata
        from order_desk import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("✅ Database tables ready")

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """
    Dependency injection for FastAPI routes.
    Yields a session from the application's store handle and ensures cleanup.
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
