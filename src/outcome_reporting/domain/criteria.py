"""Clinical outcome criteria tracked per patient and per reporting period."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Criterion(StrEnum):
    """The fixed set of clinical-status criteria, in report order."""

    MED_REC_COMPLETE = "med_rec_complete"
    BP_AT_GOAL = "bp_at_goal"
    HOSPITAL_VISIT_SINCE_LAST_REVIEW = "hospital_visit_since_last_review"
    A1C_AT_GOAL = "a1c_at_goal"
    FALL_SINCE_LAST_VISIT = "fall_since_last_visit"
    USE_BENZO = "use_benzo"
    USE_OPIOIDS = "use_opioids"
    USE_ANTIPSYCHOTIC = "use_antipsychotic"

    @property
    def label(self) -> str:
        """Return the human-readable row label used by report tables."""

        return _LABELS[self]


_LABELS: dict[Criterion, str] = {
    Criterion.MED_REC_COMPLETE: "Med Rec Complete",
    Criterion.BP_AT_GOAL: "BP at Goal",
    Criterion.HOSPITAL_VISIT_SINCE_LAST_REVIEW: "Hospital Visit Since Last Review",
    Criterion.A1C_AT_GOAL: "A1C at Goal",
    Criterion.FALL_SINCE_LAST_VISIT: "Fall Since Last Visit",
    Criterion.USE_BENZO: "Use Benzo",
    Criterion.USE_OPIOIDS: "Use Opioids",
    Criterion.USE_ANTIPSYCHOTIC: "Use Antipsychotic",
}

CRITERIA_ORDER: tuple[Criterion, ...] = tuple(Criterion)


@dataclass(frozen=True)
class CriterionFlags:
    """One value per criterion; `None` means the source never recorded it."""

    med_rec_complete: bool | None = None
    bp_at_goal: bool | None = None
    hospital_visit_since_last_review: bool | None = None
    a1c_at_goal: bool | None = None
    fall_since_last_visit: bool | None = None
    use_benzo: bool | None = None
    use_opioids: bool | None = None
    use_antipsychotic: bool | None = None

    def value_of(self, criterion: Criterion) -> bool:
        """Return the flag for `criterion`, reading a missing value as False."""

        return bool(getattr(self, criterion.value))

    def as_resolved(self) -> dict[Criterion, bool]:
        """Return every criterion's value with missing values read as False."""

        return {criterion: self.value_of(criterion) for criterion in CRITERIA_ORDER}
