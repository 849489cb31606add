from typing import AsyncGenerator
import logging

from sqlmodel import SQLModel
from sqlalchemy.ext.asyncio import create_async_engine
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool, StaticPool

from .config import get_settings

logger = logging.getLogger("seva.database")

DATABASE_URL = get_settings().database_url

engine_kwargs = {"echo": False, "future": True}
if DATABASE_URL.startswith("sqlite"):
    # Allow connections to be used across threads (useful for uvicorn worker threads)
    engine_kwargs["connect_args"] = {"check_same_thread": False}

    if (
        ":memory:" in DATABASE_URL
        or "mode=memory" in DATABASE_URL
        or DATABASE_URL == "sqlite+aiosqlite://"
    ):
        # In-memory DBs live as long as their single connection; share it.
        engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs["poolclass"] = NullPool
elif "asyncpg" in DATABASE_URL:
    # QueuePool can deadlock asyncpg connections under uvicorn's loop handling.
    engine_kwargs["poolclass"] = NullPool

engine = create_async_engine(DATABASE_URL, **engine_kwargs)

async_session_factory = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        yield session


async def init_db() -> None:
    # Postgres schemas are owned by Alembic (`alembic upgrade head` in the
    # deployment pipeline). Running create_all there could emit DDL that
    # disagrees with the migrations, so only SQLite creates tables directly.
    dialect = engine.dialect.name
    if "postgres" in dialect:
        logger.info("Skipping create_all for %s; run alembic migrations", dialect)
        return

    # Import models so their tables are registered on the metadata.
    from . import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def dispose_engine() -> None:
    await engine.dispose()
