"""Async database configuration with PostgreSQL/SQLite support.

Uses asyncpg for PostgreSQL or aiosqlite for SQLite.
SQLModel provides the ORM layer on top of SQLAlchemy.
"""

import logging
from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from src.config import get_settings

logger = logging.getLogger(__name__)


def normalize_database_url(url: str) -> str:
    """Rewrite plain PostgreSQL URLs to the asyncpg driver.

    Hosting providers hand out postgres:// but SQLAlchemy needs postgresql+asyncpg://
    """
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def create_engine(url: str) -> AsyncEngine:
    """Create an async engine with driver-appropriate settings."""
    url = normalize_database_url(url)
    engine_kwargs = {
        "echo": False,
        "future": True,
    }

    # SQLite needs special handling for async
    if "sqlite" in url:
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        database = make_url(url).database
        if database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)

    return create_async_engine(url, **engine_kwargs)


DATABASE_URL = normalize_database_url(get_settings().database_url)

engine = create_engine(DATABASE_URL)

# Async session factory
async_session = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_db() -> None:
    """Initialize database and create all tables.

    Called on application startup. Safe to call multiple times -
    SQLModel only creates tables that don't exist. Raises if the
    database cannot be reached.
    """
    # Import models to ensure they're registered with SQLModel.metadata
    from src.storage import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Database ready at %s", engine.url.render_as_string(hide_password=True))
