"""SQLAlchemy metadata definitions for outcome reporting read tables."""

from __future__ import annotations

import sqlalchemy as sa

from outcome_reporting.domain.criteria import CRITERIA_ORDER

metadata = sa.MetaData()
sqlite_bigint = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def _criterion_columns() -> list[sa.Column]:
    return [
        sa.Column(criterion.value, sa.Boolean(), nullable=True) for criterion in CRITERIA_ORDER
    ]


sites = sa.Table(
    "sites",
    metadata,
    sa.Column("id", sqlite_bigint, primary_key=True, autoincrement=True),
    sa.Column("name", sa.Text(), nullable=False),
    sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    ),
    sa.UniqueConstraint("name", name="uq_sites_name"),
)

patients = sa.Table(
    "patients",
    metadata,
    sa.Column("id", sqlite_bigint, primary_key=True, autoincrement=True),
    sa.Column("first_name", sa.Text(), nullable=False),
    sa.Column("last_name", sa.Text(), nullable=False),
    sa.Column("site_name", sa.Text(), nullable=False),
    sa.Column("building", sa.Text(), nullable=True),
    sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    *_criterion_columns(),
    sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    ),
)

sa.Index("ix_patients_site_name", patients.c.site_name)

status_snapshots = sa.Table(
    "status_snapshots",
    metadata,
    sa.Column("id", sqlite_bigint, primary_key=True, autoincrement=True),
    sa.Column("patient_id", sqlite_bigint, sa.ForeignKey("patients.id"), nullable=False),
    sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    ),
    *_criterion_columns(),
)

sa.Index(
    "ix_status_snapshots_patient_id_created_at_id",
    status_snapshots.c.patient_id,
    status_snapshots.c.created_at,
    status_snapshots.c.id,
)

activities = sa.Table(
    "activities",
    metadata,
    sa.Column("id", sqlite_bigint, primary_key=True, autoincrement=True),
    sa.Column("patient_id", sqlite_bigint, sa.ForeignKey("patients.id"), nullable=False),
    sa.Column("activity_type", sa.Text(), nullable=True),
    sa.Column("user_initials", sa.Text(), nullable=True),
    sa.Column("site_name", sa.Text(), nullable=True),
    sa.Column("building", sa.Text(), nullable=True),
    sa.Column("service_datetime", sa.DateTime(timezone=True), nullable=True),
    sa.Column("duration_minutes", sa.Float(), nullable=False, server_default=sa.text("0")),
    sa.Column("notes", sa.Text(), nullable=True),
    sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    ),
    sa.CheckConstraint("duration_minutes >= 0", name="ck_activities_duration_non_negative"),
)

sa.Index(
    "ix_activities_patient_id_service_datetime",
    activities.c.patient_id,
    activities.c.service_datetime,
)
