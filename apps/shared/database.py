"""
Database configuration and session management

This module provides the async SQLAlchemy setup for database connectivity.
NO models are defined here - this is just infrastructure.
"""

import logging
import os
from typing import Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool, StaticPool

logger = logging.getLogger(__name__)

# Get database URL from environment variable
DATABASE_URL = os.getenv("DATABASE_URL", "postgresql+asyncpg://blog_user:changeme@db:5432/blog_db")
DATABASE_ECHO = os.getenv("DATABASE_ECHO", "false").lower() in ("1", "true", "yes")

# Base class for ORM models
Base = declarative_base()


def get_async_url(url: str) -> str:
    """Convert a sync SQLAlchemy URL to an async one."""
    if url.startswith("sqlite://") and not url.startswith("sqlite+"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgresql+psycopg2://"):
        return url.replace("postgresql+psycopg2://", "postgresql+asyncpg://", 1)
    return url


def _is_memory_sqlite(url: str) -> bool:
    return url.startswith("sqlite") and (url.endswith(":memory:") or url.endswith("://"))


class Database:
    """
    Long-lived handle to the storage layer.

    Owns one async engine and the session factory built on it. Created once
    at process startup and shared by every request.
    """

    def __init__(self, url: str = DATABASE_URL, echo: bool = DATABASE_ECHO):
        self.url = get_async_url(url)

        if _is_memory_sqlite(self.url):
            # One shared connection, otherwise every checkout sees an empty database
            engine_kwargs = {
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            }
        else:
            # Using NullPool for better compatibility with containerized environments
            engine_kwargs = {"poolclass": NullPool}

        self.engine = create_async_engine(self.url, echo=echo, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    def session(self) -> AsyncSession:
        """
        Open a new session.

        Usage:
            async with database.session() as session:
                ...
        """
        return self.session_factory()

    async def create_all(self) -> None:
        """Create all tables registered on Base."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def check_connection(self) -> bool:
        """
        Test database connectivity
        Returns True if connection successful, False otherwise
        """
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning(f"Database connectivity check failed: {type(e).__name__}: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


_database: Optional[Database] = None


def get_database() -> Database:
    """
    Dependency injection for the shared database handle
    Usage in FastAPI endpoints:

    @app.get("/endpoint")
    async def endpoint(database: Database = Depends(get_database)):
        # use database here
        pass
    """
    global _database
    if _database is None:
        _database = Database()
    return _database
