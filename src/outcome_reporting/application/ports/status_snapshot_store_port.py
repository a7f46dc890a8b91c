"""Port for reading per-patient clinical-status snapshot history."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from outcome_reporting.domain.criteria import CriterionFlags


@dataclass(frozen=True)
class StatusSnapshotRecord:
    """Immutable criterion values captured when a patient's status was edited."""

    snapshot_id: int
    patient_id: int
    created_at: datetime | str | None
    flags: CriterionFlags = field(default_factory=CriterionFlags)


class StatusSnapshotStorePort(Protocol):
    """Async read contract for the append-only snapshot history."""

    async def list_snapshots_for_patient(self, *, patient_id: int) -> list[StatusSnapshotRecord]:
        """Return all snapshots for `patient_id` in creation order.

        Creation order means ascending `created_at`, then ascending `snapshot_id`.
        """
