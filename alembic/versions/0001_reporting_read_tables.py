"""Read tables for sites, patients, status snapshots and activities."""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_reporting_read_tables"
down_revision = None
branch_labels = None
depends_on = None

sqlite_bigint = sa.BigInteger().with_variant(sa.Integer(), "sqlite")

_CRITERION_COLUMNS = (
    "med_rec_complete",
    "bp_at_goal",
    "hospital_visit_since_last_review",
    "a1c_at_goal",
    "fall_since_last_visit",
    "use_benzo",
    "use_opioids",
    "use_antipsychotic",
)


def _criterion_columns() -> list[sa.Column]:
    return [sa.Column(name, sa.Boolean(), nullable=True) for name in _CRITERION_COLUMNS]


def _created_at_column() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    )


def upgrade() -> None:
    op.create_table(
        "sites",
        sa.Column("id", sqlite_bigint, primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at_column(),
        sa.UniqueConstraint("name", name="uq_sites_name"),
    )

    op.create_table(
        "patients",
        sa.Column("id", sqlite_bigint, primary_key=True, autoincrement=True),
        sa.Column("first_name", sa.Text(), nullable=False),
        sa.Column("last_name", sa.Text(), nullable=False),
        sa.Column("site_name", sa.Text(), nullable=False),
        sa.Column("building", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_criterion_columns(),
        _created_at_column(),
    )
    op.create_index("ix_patients_site_name", "patients", ["site_name"])

    op.create_table(
        "status_snapshots",
        sa.Column("id", sqlite_bigint, primary_key=True, autoincrement=True),
        sa.Column("patient_id", sqlite_bigint, sa.ForeignKey("patients.id"), nullable=False),
        _created_at_column(),
        *_criterion_columns(),
    )
    op.create_index(
        "ix_status_snapshots_patient_id_created_at_id",
        "status_snapshots",
        ["patient_id", "created_at", "id"],
    )

    op.create_table(
        "activities",
        sa.Column("id", sqlite_bigint, primary_key=True, autoincrement=True),
        sa.Column("patient_id", sqlite_bigint, sa.ForeignKey("patients.id"), nullable=False),
        sa.Column("activity_type", sa.Text(), nullable=True),
        sa.Column("user_initials", sa.Text(), nullable=True),
        sa.Column("site_name", sa.Text(), nullable=True),
        sa.Column("building", sa.Text(), nullable=True),
        sa.Column("service_datetime", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration_minutes", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("notes", sa.Text(), nullable=True),
        _created_at_column(),
        sa.CheckConstraint(
            "duration_minutes >= 0",
            name="ck_activities_duration_non_negative",
        ),
    )
    op.create_index(
        "ix_activities_patient_id_service_datetime",
        "activities",
        ["patient_id", "service_datetime"],
    )


def downgrade() -> None:
    op.drop_index("ix_activities_patient_id_service_datetime", table_name="activities")
    op.drop_table("activities")
    op.drop_index("ix_status_snapshots_patient_id_created_at_id", table_name="status_snapshots")
    op.drop_table("status_snapshots")
    op.drop_index("ix_patients_site_name", table_name="patients")
    op.drop_table("patients")
    op.drop_table("sites")
