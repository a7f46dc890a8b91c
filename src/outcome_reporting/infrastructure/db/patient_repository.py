"""SQLAlchemy adapter for the patient directory."""

from __future__ import annotations

from typing import cast

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from outcome_reporting.application.ports.patient_directory_port import (
    PatientDirectoryPort,
    PatientRecord,
)
from outcome_reporting.domain.criteria import CRITERIA_ORDER
from outcome_reporting.infrastructure.db.flag_rows import criterion_flags_from_row
from outcome_reporting.infrastructure.db.metadata import patients


class SqlAlchemyPatientRepository(PatientDirectoryPort):
    """Patient directory backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list_patients(self) -> list[PatientRecord]:
        """Return every patient ordered by id with current criterion flags."""

        statement = sa.select(
            patients.c.id,
            patients.c.first_name,
            patients.c.last_name,
            patients.c.site_name,
            patients.c.building,
            patients.c.is_active,
            *(patients.c[criterion.value] for criterion in CRITERIA_ORDER),
        ).order_by(patients.c.id)

        async with self._session_factory() as session:
            result = await session.execute(statement)

        return [_to_patient_record(row) for row in result.mappings().all()]


def _to_patient_record(row: sa.RowMapping) -> PatientRecord:
    return PatientRecord(
        patient_id=int(row["id"]),
        first_name=cast(str, row["first_name"]),
        last_name=cast(str, row["last_name"]),
        site_name=cast(str, row["site_name"]),
        building=cast(str | None, row["building"]),
        is_active=bool(row["is_active"]),
        current_flags=criterion_flags_from_row(row),
    )
