"""Pydantic models for outcome report endpoints."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from outcome_reporting.domain.criteria import Criterion


class StrictModel(BaseModel):
    """Base model with strict unknown-field rejection."""

    model_config = ConfigDict(extra="forbid")


class CriterionTallyResponse(StrictModel):
    """Yes/no/total counts with percentage for one criterion."""

    yes: int = Field(ge=0)
    no: int = Field(ge=0)
    total: int = Field(ge=0)
    percentage: float = Field(ge=0.0, le=100.0)
    percentage_display: str


class SiteTallyResponse(StrictModel):
    """One site's tally inside a per-criterion breakdown."""

    site_name: str
    site_id: int | None
    tally: CriterionTallyResponse


class CriteriaReportRowResponse(StrictModel):
    """One criterion broken down by site with the all-sites total."""

    criterion: Criterion
    label: str
    per_site: list[SiteTallyResponse]
    total: CriterionTallyResponse


class CriteriaReportResponse(StrictModel):
    """All-sites criteria report for one month."""

    month: int = Field(ge=1, le=12)
    year: int
    criteria: list[CriteriaReportRowResponse]
    degraded_patient_ids: list[int]


class SiteReportResponse(StrictModel):
    """Single-site report with one named tally per criterion."""

    month: int = Field(ge=1, le=12)
    year: int
    site_name: str
    site_id: int | None
    patient_count: int = Field(ge=0)
    med_rec_complete: CriterionTallyResponse
    bp_at_goal: CriterionTallyResponse
    hospital_visit_since_last_review: CriterionTallyResponse
    a1c_at_goal: CriterionTallyResponse
    fall_since_last_visit: CriterionTallyResponse
    use_benzo: CriterionTallyResponse
    use_opioids: CriterionTallyResponse
    use_antipsychotic: CriterionTallyResponse
    degraded_patient_ids: list[int]


class PatientActivityResponse(StrictModel):
    """Duration totals for one patient."""

    patient_id: int
    patient_name: str
    total_minutes: float
    total_hours: float
    activity_count: int = Field(ge=0)
    duration_display: str


class SitePatientResponse(StrictModel):
    """Patients of one site with site-level totals."""

    site_name: str
    site_id: int | None
    patients: list[PatientActivityResponse]
    total_site_minutes: float
    total_site_hours: float
    total_site_activities: int = Field(ge=0)


class PatientActivityReportResponse(StrictModel):
    """Per-site patient duration rollup for one month."""

    month: int = Field(ge=1, le=12)
    year: int
    sites: list[SitePatientResponse]
    total_minutes: float
    total_hours: float
    total_activities: int = Field(ge=0)
    degraded_patient_ids: list[int]


class PatientDetailQueryParams(StrictModel):
    """Validated filters for the patient detail report."""

    start_date: date | None = None
    end_date: date | None = None
    month: int | None = Field(default=None, ge=1, le=12)
    year: int | None = None
    site_name: str | None = None
    building: str | None = None


class PatientDetailActivityResponse(StrictModel):
    """One activity row in a patient detail report."""

    activity_id: int
    activity_type: str | None
    service_datetime: datetime | None
    duration_minutes: float
    duration_display: str
    site_name: str | None
    building: str | None
    user_initials: str | None
    notes: str | None


class PatientDetailReportResponse(StrictModel):
    """Filtered activities for one patient with totals."""

    patient_id: int
    patient_name: str
    filters: PatientDetailQueryParams
    activities: list[PatientDetailActivityResponse]
    total_minutes: float
    total_hours: float
    activity_count: int = Field(ge=0)
