"""
Database engine, session factory, and base model class.

This module sets up SQLAlchemy 2.0 with async support:

  - create_engine(): builds the async engine for a database URL
  - create_session_factory(): builds the AsyncSession factory for an engine
  - Base: declarative base class that all ORM models inherit from

Nothing is created at import time. The FastAPI lifespan (main.py) builds the
engine once at startup and hands the session factory to the stores, which
open one short session per operation. The tests do the same against a
throwaway SQLite file.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create the async engine.

    echo=True logs all SQL statements, wired to settings.DEBUG.
    """
    return create_async_engine(database_url, echo=echo)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory: creates new AsyncSession instances.

    expire_on_commit=False keeps loaded attributes readable after commit.
    Stores return detached ORM objects to the services and routers, and
    without this any attribute access would trigger a lazy load outside the
    session.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables that don't exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass
