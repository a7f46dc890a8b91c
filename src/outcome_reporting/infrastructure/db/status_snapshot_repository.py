"""SQLAlchemy adapter for per-patient status snapshot history."""

from __future__ import annotations

from datetime import datetime
from typing import cast

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from outcome_reporting.application.ports.status_snapshot_store_port import (
    StatusSnapshotRecord,
    StatusSnapshotStorePort,
)
from outcome_reporting.domain.criteria import CRITERIA_ORDER
from outcome_reporting.infrastructure.db.flag_rows import criterion_flags_from_row
from outcome_reporting.infrastructure.db.metadata import status_snapshots
from outcome_reporting.infrastructure.db.timestamps import ensure_utc_or_none


class SqlAlchemyStatusSnapshotRepository(StatusSnapshotStorePort):
    """Snapshot store backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list_snapshots_for_patient(self, *, patient_id: int) -> list[StatusSnapshotRecord]:
        """Return a patient's snapshots in creation order (created_at, then id)."""

        statement = (
            sa.select(
                status_snapshots.c.id,
                status_snapshots.c.patient_id,
                status_snapshots.c.created_at,
                *(status_snapshots.c[criterion.value] for criterion in CRITERIA_ORDER),
            )
            .where(status_snapshots.c.patient_id == patient_id)
            .order_by(status_snapshots.c.created_at.asc(), status_snapshots.c.id.asc())
        )

        async with self._session_factory() as session:
            result = await session.execute(statement)

        return [
            StatusSnapshotRecord(
                snapshot_id=int(row["id"]),
                patient_id=int(row["patient_id"]),
                created_at=ensure_utc_or_none(cast(datetime, row["created_at"])),
                flags=criterion_flags_from_row(row),
            )
            for row in result.mappings().all()
        ]
