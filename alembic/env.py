"""Alembic environment for the reporting read tables."""

from __future__ import annotations

import asyncio
import os
from logging.config import fileConfig
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy import engine_from_config, pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context
from outcome_reporting.infrastructure.db.metadata import metadata

config = context.config

_PLACEHOLDER_URL = "sqlite:///./outcome_reporting.db"
_ASYNC_DRIVERS = ("+aiosqlite", "+asyncpg")


def _migration_url() -> str:
    """Return the explicit alembic URL, or DATABASE_URL when only the placeholder is set."""

    configured = config.get_main_option("sqlalchemy.url") or _PLACEHOLDER_URL
    if configured != _PLACEHOLDER_URL:
        return configured
    load_dotenv(Path(__file__).resolve().parents[1] / ".env")
    return os.getenv("DATABASE_URL") or configured


def _apply_migrations(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=metadata)
    with context.begin_transaction():
        context.run_migrations()


async def _migrate_async(engine_options: dict[str, str]) -> None:
    engine = async_engine_from_config(engine_options, prefix="sqlalchemy.", poolclass=pool.NullPool)
    async with engine.connect() as connection:
        await connection.run_sync(_apply_migrations)
    await engine.dispose()


def migrate_offline(url: str) -> None:
    """Emit migration SQL for `url` without connecting."""

    context.configure(
        url=url,
        target_metadata=metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def migrate_online(url: str) -> None:
    """Apply migrations through a sync or async engine, matching the URL driver."""

    engine_options = dict(config.get_section(config.config_ini_section, {}))
    engine_options["sqlalchemy.url"] = url
    if any(driver in url for driver in _ASYNC_DRIVERS):
        asyncio.run(_migrate_async(engine_options))
        return

    engine = engine_from_config(engine_options, prefix="sqlalchemy.", poolclass=pool.NullPool)
    with engine.connect() as connection:
        _apply_migrations(connection)


if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

if context.is_offline_mode():
    migrate_offline(_migration_url())
else:
    migrate_online(_migration_url())
