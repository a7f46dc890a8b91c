"""Select the applicable clinical-status values for one patient and period."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, tzinfo
from enum import StrEnum
from typing import Protocol

from outcome_reporting.domain.criteria import Criterion, CriterionFlags
from outcome_reporting.domain.period import (
    ReportingPeriod,
    Timestamp,
    local_naive,
)


class ResolutionSource(StrEnum):
    """Where a patient's resolved values came from."""

    SNAPSHOT = "snapshot"
    CURRENT_FLAGS = "current_flags"
    FELL_BACK_DUE_TO_ERROR = "fell_back_due_to_error"


class StatusSnapshotLike(Protocol):
    """Minimal snapshot shape the resolver reads."""

    @property
    def created_at(self) -> Timestamp: ...

    @property
    def flags(self) -> CriterionFlags: ...


@dataclass(frozen=True)
class ResolvedCriteria:
    """One boolean per criterion plus the source that produced them."""

    source: ResolutionSource
    values: dict[Criterion, bool]

    @property
    def degraded(self) -> bool:
        return self.source is ResolutionSource.FELL_BACK_DUE_TO_ERROR


def resolve_criteria(
    snapshots: Sequence[StatusSnapshotLike],
    current_flags: CriterionFlags,
    period: ReportingPeriod,
    *,
    timezone: tzinfo,
) -> ResolvedCriteria:
    """Resolve all criteria at once from the latest in-period snapshot.

    When no snapshot was created in the period the patient's current flags
    apply to every criterion. Snapshots are never mixed per criterion.
    """

    latest = select_period_snapshot(snapshots, period, timezone=timezone)
    if latest is None:
        return ResolvedCriteria(
            source=ResolutionSource.CURRENT_FLAGS,
            values=current_flags.as_resolved(),
        )
    return ResolvedCriteria(source=ResolutionSource.SNAPSHOT, values=latest.flags.as_resolved())


def resolve_after_fetch_error(current_flags: CriterionFlags) -> ResolvedCriteria:
    """Resolve from current flags because the snapshot history was unavailable."""

    return ResolvedCriteria(
        source=ResolutionSource.FELL_BACK_DUE_TO_ERROR,
        values=current_flags.as_resolved(),
    )


def select_period_snapshot(
    snapshots: Sequence[StatusSnapshotLike],
    period: ReportingPeriod,
    *,
    timezone: tzinfo,
) -> StatusSnapshotLike | None:
    """Return the most recently created snapshot inside `period`, if any.

    Equal creation times resolve to the element appearing later in store order.
    """

    best: StatusSnapshotLike | None = None
    best_key: tuple[datetime, int] | None = None
    for index, snapshot in enumerate(snapshots):
        local = local_naive(snapshot.created_at, timezone=timezone)
        # Already local, so `contains` compares it as-is.
        if local is None or not period.contains(local, timezone=timezone):
            continue
        key = (local, index)
        if best_key is None or key > best_key:
            best, best_key = snapshot, key
    return best
