"""Port for reading current patient records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from outcome_reporting.domain.criteria import CriterionFlags


@dataclass(frozen=True)
class PatientRecord:
    """Current patient state, including the fallback value of every criterion."""

    patient_id: int
    first_name: str
    last_name: str
    site_name: str
    is_active: bool = True
    building: str | None = None
    current_flags: CriterionFlags = field(default_factory=CriterionFlags)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class PatientDirectoryPort(Protocol):
    """Async read contract for the patient directory."""

    async def list_patients(self) -> list[PatientRecord]:
        """Return every patient with its site assignment and current flags."""
