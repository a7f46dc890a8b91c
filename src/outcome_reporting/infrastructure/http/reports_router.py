"""FastAPI router for outcome report endpoints."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date

from fastapi import APIRouter, HTTPException, Query

from outcome_reporting.application.dto.report_models import (
    CriteriaReportResponse,
    CriteriaReportRowResponse,
    CriterionTallyResponse,
    PatientActivityReportResponse,
    PatientActivityResponse,
    PatientDetailActivityResponse,
    PatientDetailQueryParams,
    PatientDetailReportResponse,
    SitePatientResponse,
    SiteReportResponse,
    SiteTallyResponse,
)
from outcome_reporting.application.services.criteria_report_service import (
    CriteriaReportService,
)
from outcome_reporting.application.services.patient_activity_report_service import (
    PatientActivityData,
    PatientActivityReportService,
)
from outcome_reporting.application.services.report_errors import (
    ReportGenerationError,
    UnknownPatientError,
    UnknownSiteError,
)
from outcome_reporting.domain.criteria import CRITERIA_ORDER
from outcome_reporting.domain.duration import format_duration, round_for_display
from outcome_reporting.domain.period import (
    DateRange,
    InvalidDateRangeError,
    InvalidReportingPeriodError,
    ReportingPeriod,
    coerce_timestamp,
)
from outcome_reporting.domain.tally import CriterionTally, format_percentage

PeriodFactory = Callable[[], ReportingPeriod]
_REPORT_FAILED_STATUS = 503


def build_reports_router(
    *,
    criteria_service: CriteriaReportService,
    activity_service: PatientActivityReportService,
    current_period: PeriodFactory,
) -> APIRouter:
    """Build router exposing criteria, site and patient activity reports."""

    router = APIRouter(tags=["reports"])

    def _resolve_period(month: int | None, year: int | None) -> ReportingPeriod:
        if month is None and year is None:
            return current_period()
        fallback = current_period()
        try:
            return ReportingPeriod(
                month=month if month is not None else fallback.month,
                year=year if year is not None else fallback.year,
            )
        except InvalidReportingPeriodError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

    @router.get("/reports/criteria", response_model=CriteriaReportResponse)
    async def criteria_report(
        month: int | None = Query(default=None, ge=1, le=12),
        year: int | None = Query(default=None, ge=1),
        include_empty_sites: bool = True,
    ) -> CriteriaReportResponse:
        period = _resolve_period(month, year)
        try:
            report = await criteria_service.build_all_sites_report(
                period=period,
                include_empty_sites=include_empty_sites,
            )
        except ReportGenerationError as exc:
            raise HTTPException(status_code=_REPORT_FAILED_STATUS, detail=str(exc)) from exc

        return CriteriaReportResponse(
            month=report.period.month,
            year=report.period.year,
            criteria=[
                CriteriaReportRowResponse(
                    criterion=row.criterion,
                    label=row.criterion.label,
                    per_site=[
                        SiteTallyResponse(
                            site_name=site.site_name,
                            site_id=site.site_id,
                            tally=_tally_response(site.tally),
                        )
                        for site in row.per_site
                    ],
                    total=_tally_response(row.total),
                )
                for row in report.rows
            ],
            degraded_patient_ids=list(report.degraded_patient_ids),
        )

    @router.get("/reports/sites/{site_name}", response_model=SiteReportResponse)
    async def site_report(
        site_name: str,
        month: int | None = Query(default=None, ge=1, le=12),
        year: int | None = Query(default=None, ge=1),
    ) -> SiteReportResponse:
        period = _resolve_period(month, year)
        try:
            report = await criteria_service.build_site_report(site_name=site_name, period=period)
        except UnknownSiteError as exc:
            raise HTTPException(status_code=404, detail="site not found") from exc
        except ReportGenerationError as exc:
            raise HTTPException(status_code=_REPORT_FAILED_STATUS, detail=str(exc)) from exc

        named_tallies = {
            criterion.value: _tally_response(report.tallies[criterion])
            for criterion in CRITERIA_ORDER
        }
        return SiteReportResponse(
            month=report.period.month,
            year=report.period.year,
            site_name=report.site_name,
            site_id=report.site_id,
            patient_count=report.patient_count,
            degraded_patient_ids=list(report.degraded_patient_ids),
            **named_tallies,
        )

    @router.get("/reports/patients", response_model=PatientActivityReportResponse)
    async def patient_activity_report(
        month: int | None = Query(default=None, ge=1, le=12),
        year: int | None = Query(default=None, ge=1),
    ) -> PatientActivityReportResponse:
        period = _resolve_period(month, year)
        try:
            report = await activity_service.build_site_rollup(period=period)
        except ReportGenerationError as exc:
            raise HTTPException(status_code=_REPORT_FAILED_STATUS, detail=str(exc)) from exc

        return PatientActivityReportResponse(
            month=report.period.month,
            year=report.period.year,
            sites=[
                SitePatientResponse(
                    site_name=site.site_name,
                    site_id=site.site_id,
                    patients=[_patient_response(patient) for patient in site.patients],
                    total_site_minutes=round_for_display(site.total_site_minutes),
                    total_site_hours=round_for_display(site.total_site_hours),
                    total_site_activities=site.total_site_activities,
                )
                for site in report.sites
            ],
            total_minutes=round_for_display(report.grand_total.total_minutes),
            total_hours=round_for_display(report.grand_total.total_hours),
            total_activities=report.grand_total.activity_count,
            degraded_patient_ids=list(report.degraded_patient_ids),
        )

    @router.get(
        "/reports/patients/{patient_id}/activities",
        response_model=PatientDetailReportResponse,
    )
    async def patient_detail_report(
        patient_id: int,
        start_date: date | None = None,
        end_date: date | None = None,
        month: int | None = Query(default=None, ge=1, le=12),
        year: int | None = Query(default=None, ge=1),
        site_name: str | None = None,
        building: str | None = None,
    ) -> PatientDetailReportResponse:
        filters = PatientDetailQueryParams(
            start_date=start_date,
            end_date=end_date,
            month=month,
            year=year,
            site_name=site_name,
            building=building,
        )
        if (month is None) != (year is None):
            raise HTTPException(status_code=422, detail="month and year must be given together")
        try:
            date_range = (
                DateRange(start_date=start_date, end_date=end_date)
                if start_date is not None or end_date is not None
                else None
            )
            period = (
                ReportingPeriod(month=month, year=year)
                if month is not None and year is not None
                else None
            )
        except (InvalidDateRangeError, InvalidReportingPeriodError) as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

        try:
            report = await activity_service.build_patient_detail(
                patient_id=patient_id,
                period=period,
                date_range=date_range,
                site_name=site_name,
                building=building,
            )
        except UnknownPatientError as exc:
            raise HTTPException(status_code=404, detail="patient not found") from exc
        except ReportGenerationError as exc:
            raise HTTPException(status_code=_REPORT_FAILED_STATUS, detail=str(exc)) from exc

        return PatientDetailReportResponse(
            patient_id=report.patient_id,
            patient_name=report.patient_name,
            filters=filters,
            activities=[
                PatientDetailActivityResponse(
                    activity_id=activity.activity_id,
                    activity_type=activity.activity_type,
                    service_datetime=coerce_timestamp(activity.service_datetime),
                    duration_minutes=round_for_display(activity.duration_minutes or 0.0),
                    duration_display=format_duration(activity.duration_minutes or 0.0),
                    site_name=activity.site_name,
                    building=activity.building,
                    user_initials=activity.user_initials,
                    notes=activity.notes,
                )
                for activity in report.activities
            ],
            total_minutes=round_for_display(report.totals.total_minutes),
            total_hours=round_for_display(report.totals.total_hours),
            activity_count=report.totals.activity_count,
        )

    return router


def _tally_response(tally: CriterionTally) -> CriterionTallyResponse:
    return CriterionTallyResponse(
        yes=tally.yes,
        no=tally.no,
        total=tally.total,
        percentage=tally.percentage,
        percentage_display=format_percentage(tally),
    )


def _patient_response(patient: PatientActivityData) -> PatientActivityResponse:
    return PatientActivityResponse(
        patient_id=patient.patient_id,
        patient_name=patient.patient_name,
        total_minutes=round_for_display(patient.total_minutes),
        total_hours=round_for_display(patient.total_hours),
        activity_count=patient.activity_count,
        duration_display=format_duration(patient.total_minutes),
    )
