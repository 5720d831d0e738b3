"""Database engine, session factory and declarative base."""

from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


def utcnow() -> datetime:
    """Naive UTC timestamp, the format stored in DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create the async engine.

    In-memory SQLite needs a single shared connection, otherwise every
    session would see its own empty database.
    """
    kwargs = {"echo": echo}
    if database_url.startswith("sqlite") and ":memory:" in database_url:
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}
    return create_async_engine(database_url, **kwargs)


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to the engine."""
    return async_sessionmaker(engine, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create all tables."""
    # Import models so they register on Base.metadata
    from feedback_translator.models.database import analysis_job, learned_pattern  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
