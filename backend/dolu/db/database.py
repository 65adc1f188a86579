"""
Engine and sessions for the booking database.
SQLite file for local runs and tests, PostgreSQL (asyncpg) in production.
"""
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator
import uuid

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from dolu.config import settings


class Base(DeclarativeBase):
    pass


def new_uuid() -> str:
    """Primary key default for uuid-keyed tables."""
    return str(uuid.uuid4())


def build_engine(database_url: str, echo: bool = False):
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return create_async_engine(
            database_url, echo=echo, pool_pre_ping=True, pool_size=10, max_overflow=20,
        )

    if url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    # timeout: seconds a writer waits on a locked database file
    return create_async_engine(
        database_url, echo=echo, connect_args={"check_same_thread": False, "timeout": 30},
    )


engine = build_engine(settings.database_url, settings.database_echo)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def init_db():
    from dolu import models  # noqa: F401  registers every table on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db():
    await engine.dispose()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request, committed on success."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Same unit of work as get_db, for scripts."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
