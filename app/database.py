# python
"""Database engine and session utilities.

This module sets up the asynchronous database engine and session factory
using SQLAlchemy, and provides a utility for fetching an asynchronous
database session. Services never import the session themselves; it is
handed to them by the request dependencies.
"""
import os
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings

# For testing, prioritize TEST_DATABASE_URL
DB_URL = None
if os.getenv("TESTING") == "true":
    DB_URL = os.getenv("TEST_DATABASE_URL") or settings.test_database_url
else:
    DB_URL = settings.database_url

DB_URL = (DB_URL or "").strip()
if not DB_URL:
    raise RuntimeError(
        "DATABASE_URL is not configured. Set it in the environment or .env file (e.g., DATABASE_URL=postgresql+asyncpg://<user>:<pass>@<host>/<db>)."
    )

engine_options: dict[str, Any] = {"echo": settings.debug}
if DB_URL.startswith("postgresql"):
    engine_options.update(
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=True,
    )

engine = create_async_engine(DB_URL, **engine_options)

AsyncSessionLocal = async_sessionmaker(bind=engine, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, Any]:
    async with AsyncSessionLocal() as session:
        yield session
