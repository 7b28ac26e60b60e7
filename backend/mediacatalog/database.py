"""SQLAlchemy async engine & session for the catalog database (WAL mode)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from mediacatalog.config import settings
from mediacatalog.models import Base

logger = logging.getLogger(__name__)


def unicode_lower(value):
    """SQL-callable ``str.lower``; SQLite's builtin LOWER() folds ASCII only."""
    return value.lower() if isinstance(value, str) else value


def register_functions(dbapi_conn) -> None:
    """Install the catalog's SQL functions on a raw connection."""
    dbapi_conn.create_function("unicode_lower", 1, unicode_lower, deterministic=True)


def configure_sqlite(dbapi_conn, _connection_record):
    """Apply SQLite PRAGMAs and register SQL functions on every new connection."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    register_functions(dbapi_conn)


# Ensure DB directory exists
db_path = Path(settings.database_path)
db_path.parent.mkdir(parents=True, exist_ok=True)

DATABASE_URL = f"sqlite+aiosqlite:///{db_path}"

engine = create_async_engine(
    DATABASE_URL,
    echo=settings.debug and settings.log_level == "DEBUG",
    pool_size=settings.max_db_connections,
    max_overflow=0,
)

event.listen(engine.sync_engine, "connect", configure_sqlite)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency — yields an async DB session."""
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db() -> None:
    """Create the folders/files tables and their indexes if missing."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created/verified at %s", db_path)
