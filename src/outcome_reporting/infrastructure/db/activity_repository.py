"""SQLAlchemy adapter for the service activity log."""

from __future__ import annotations

from datetime import datetime
from typing import cast

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from outcome_reporting.application.ports.activity_log_port import ActivityLogPort, ActivityRecord
from outcome_reporting.infrastructure.db.metadata import activities
from outcome_reporting.infrastructure.db.timestamps import ensure_utc_or_none

_ACTIVITY_COLUMNS = (
    activities.c.id,
    activities.c.patient_id,
    activities.c.activity_type,
    activities.c.user_initials,
    activities.c.site_name,
    activities.c.building,
    activities.c.service_datetime,
    activities.c.duration_minutes,
    activities.c.notes,
)


class SqlAlchemyActivityRepository(ActivityLogPort):
    """Activity log backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list_activities_for_patient(self, *, patient_id: int) -> list[ActivityRecord]:
        """Return one patient's activities ordered by service time."""

        statement = (
            sa.select(*_ACTIVITY_COLUMNS)
            .where(activities.c.patient_id == patient_id)
            .order_by(activities.c.service_datetime.asc(), activities.c.id.asc())
        )
        return await self._fetch(statement)

    async def list_all_activities(self) -> list[ActivityRecord]:
        """Return all activities grouped by patient, then ordered by service time."""

        statement = sa.select(*_ACTIVITY_COLUMNS).order_by(
            activities.c.patient_id.asc(),
            activities.c.service_datetime.asc(),
            activities.c.id.asc(),
        )
        return await self._fetch(statement)

    async def _fetch(self, statement: sa.Select) -> list[ActivityRecord]:
        async with self._session_factory() as session:
            result = await session.execute(statement)

        return [_to_activity_record(row) for row in result.mappings().all()]


def _to_activity_record(row: sa.RowMapping) -> ActivityRecord:
    return ActivityRecord(
        activity_id=int(row["id"]),
        patient_id=int(row["patient_id"]),
        service_datetime=ensure_utc_or_none(cast(datetime | None, row["service_datetime"])),
        duration_minutes=float(row["duration_minutes"] or 0.0),
        site_name=cast(str | None, row["site_name"]),
        building=cast(str | None, row["building"]),
        activity_type=cast(str | None, row["activity_type"]),
        user_initials=cast(str | None, row["user_initials"]),
        notes=cast(str | None, row["notes"]),
    )
