"""Async SQLAlchemy engine and session factory for report reads."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)


def create_read_engine(database_url: str) -> AsyncEngine:
    """Create an async engine that validates pooled connections before reuse."""

    return create_async_engine(database_url, pool_pre_ping=True)


def create_session_factory(database_url: str) -> async_sessionmaker[AsyncSession]:
    """Create the session factory shared by every report read adapter."""

    return async_sessionmaker(create_read_engine(database_url), expire_on_commit=False)
