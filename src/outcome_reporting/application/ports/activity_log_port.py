"""Port for reading logged service activities."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class ActivityRecord:
    """One service activity with its duration in (possibly fractional) minutes."""

    activity_id: int
    patient_id: int
    service_datetime: datetime | str | None
    duration_minutes: float | None
    site_name: str | None = None
    building: str | None = None
    activity_type: str | None = None
    user_initials: str | None = None
    notes: str | None = None


class ActivityLogPort(Protocol):
    """Async read contract for the activity log."""

    async def list_activities_for_patient(self, *, patient_id: int) -> list[ActivityRecord]:
        """Return every activity recorded for one patient."""

    async def list_all_activities(self) -> list[ActivityRecord]:
        """Return every activity for every patient in one call."""
