"""SQLAlchemy adapter for the site directory."""

from __future__ import annotations

from typing import cast

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from outcome_reporting.application.ports.site_directory_port import (
    SiteDirectoryPort,
    SiteRecord,
)
from outcome_reporting.infrastructure.db.metadata import sites


class SqlAlchemySiteRepository(SiteDirectoryPort):
    """Site directory backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list_sites(self) -> list[SiteRecord]:
        """Return all sites ordered by id, including inactive ones."""

        statement = sa.select(sites.c.id, sites.c.name, sites.c.is_active).order_by(sites.c.id)

        async with self._session_factory() as session:
            result = await session.execute(statement)

        return [
            SiteRecord(
                site_id=int(row["id"]),
                name=cast(str, row["name"]),
                is_active=bool(row["is_active"]),
            )
            for row in result.mappings().all()
        ]
