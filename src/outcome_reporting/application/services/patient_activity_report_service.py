"""Application service for per-patient activity-duration reports."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import tzinfo

from outcome_reporting.application.ports.activity_log_port import ActivityLogPort, ActivityRecord
from outcome_reporting.application.ports.patient_directory_port import (
    PatientDirectoryPort,
    PatientRecord,
)
from outcome_reporting.application.ports.site_directory_port import (
    SiteDirectoryPort,
    SiteRecord,
)
from outcome_reporting.application.services.bounded_gather import gather_bounded
from outcome_reporting.application.services.report_errors import (
    ReportGenerationError,
    UnknownPatientError,
)
from outcome_reporting.domain.duration import (
    ActivityFilter,
    DurationTotals,
    aggregate_durations,
    filter_activities,
    sum_durations,
    total_durations,
)
from outcome_reporting.domain.period import (
    DateRange,
    ReportingPeriod,
    local_naive,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatientActivityData:
    """Duration totals for one patient within the report window."""

    patient_id: int
    patient_name: str
    totals: DurationTotals
    degraded: bool = False

    @property
    def total_minutes(self) -> float:
        return self.totals.total_minutes

    @property
    def total_hours(self) -> float:
        return self.totals.total_hours

    @property
    def activity_count(self) -> int:
        return self.totals.activity_count


@dataclass(frozen=True)
class SitePatientData:
    """Patients of one site with the site's summed durations."""

    site_name: str
    site_id: int | None
    patients: list[PatientActivityData]
    totals: DurationTotals

    @property
    def total_site_minutes(self) -> float:
        return self.totals.total_minutes

    @property
    def total_site_hours(self) -> float:
        return self.totals.total_hours

    @property
    def total_site_activities(self) -> int:
        return self.totals.activity_count


@dataclass(frozen=True)
class PatientActivityReport:
    """Per-site patient duration rollup with a grand total over all sites."""

    period: ReportingPeriod
    sites: list[SitePatientData]
    grand_total: DurationTotals
    degraded_patient_ids: tuple[int, ...] = field(default_factory=tuple)

    @property
    def patients(self) -> list[PatientActivityData]:
        """Every patient row across all sites, in site then directory order."""

        return [patient for site in self.sites for patient in site.patients]


@dataclass(frozen=True)
class PatientDetailReport:
    """Filtered activities of one patient, ordered by service time."""

    patient_id: int
    patient_name: str
    activity_filter: ActivityFilter
    activities: list[ActivityRecord]
    totals: DurationTotals


class PatientActivityReportService:
    """Fold logged activity durations per patient and per site."""

    def __init__(
        self,
        *,
        site_directory: SiteDirectoryPort,
        patient_directory: PatientDirectoryPort,
        activity_log: ActivityLogPort,
        timezone: tzinfo,
        fetch_concurrency: int = 8,
        bulk_fetch: bool = False,
    ) -> None:
        self._site_directory = site_directory
        self._patient_directory = patient_directory
        self._activity_log = activity_log
        self._timezone = timezone
        self._fetch_concurrency = fetch_concurrency
        self._bulk_fetch = bulk_fetch

    async def build_site_rollup(self, *, period: ReportingPeriod) -> PatientActivityReport:
        """Return every site's patients with their durations in `period`."""

        try:
            sites = await self._site_directory.list_sites()
            patients = await self._patient_directory.list_patients()
        except Exception as exc:
            logger.exception("report_directory_fetch_failed report=patient_activity")
            raise ReportGenerationError() from exc

        site_names = {site.name for site in sites}
        in_scope = [patient for patient in patients if patient.site_name in site_names]
        activity_filter = ActivityFilter(period=period)
        if self._bulk_fetch:
            rows = await self._rows_from_bulk_fetch(in_scope, activity_filter)
        else:
            rows = await self._rows_from_patient_fetches(in_scope, activity_filter)

        site_groups = _group_rows_by_site(sites, in_scope, rows)
        degraded = tuple(row.patient_id for row in rows if row.degraded)
        grand_total = sum_durations(site.totals for site in site_groups)
        logger.info(
            "patient_activity_report_generated month=%s year=%s sites=%s patients=%s "
            "activities=%s degraded=%s",
            period.month,
            period.year,
            len(site_groups),
            len(rows),
            grand_total.activity_count,
            len(degraded),
        )
        return PatientActivityReport(
            period=period,
            sites=site_groups,
            grand_total=grand_total,
            degraded_patient_ids=degraded,
        )

    async def build_patient_detail(
        self,
        *,
        patient_id: int,
        period: ReportingPeriod | None = None,
        date_range: DateRange | None = None,
        site_name: str | None = None,
        building: str | None = None,
    ) -> PatientDetailReport:
        """Return one patient's filtered activities and their totals.

        A date range, when given, takes the place of the period filter.
        """

        try:
            patients = await self._patient_directory.list_patients()
        except Exception as exc:
            logger.exception("report_directory_fetch_failed report=patient_detail")
            raise ReportGenerationError() from exc

        patient = next((item for item in patients if item.patient_id == patient_id), None)
        if patient is None:
            raise UnknownPatientError(f"patient not found: {patient_id}")

        try:
            activities = await self._activity_log.list_activities_for_patient(
                patient_id=patient_id
            )
        except Exception as exc:
            logger.exception("activity_fetch_failed patient_id=%s", patient_id)
            raise ReportGenerationError() from exc

        activity_filter = ActivityFilter(
            period=period,
            date_range=date_range,
            site_name=site_name,
            building=building,
        )
        selected = sorted(
            filter_activities(activities, activity_filter, timezone=self._timezone),
            key=self._service_sort_key,
        )
        return PatientDetailReport(
            patient_id=patient.patient_id,
            patient_name=patient.full_name,
            activity_filter=activity_filter,
            activities=selected,
            totals=total_durations(selected),
        )

    async def _rows_from_patient_fetches(
        self,
        patients: Sequence[PatientRecord],
        activity_filter: ActivityFilter,
    ) -> list[PatientActivityData]:
        async def _patient_row(patient: PatientRecord) -> PatientActivityData:
            try:
                activities = await self._activity_log.list_activities_for_patient(
                    patient_id=patient.patient_id
                )
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "activity_fetch_failed patient_id=%s error=%s",
                    patient.patient_id,
                    exc,
                )
                return PatientActivityData(
                    patient_id=patient.patient_id,
                    patient_name=patient.full_name,
                    totals=DurationTotals(),
                    degraded=True,
                )
            return PatientActivityData(
                patient_id=patient.patient_id,
                patient_name=patient.full_name,
                totals=aggregate_durations(activities, activity_filter, timezone=self._timezone),
            )

        return await gather_bounded(patients, _patient_row, concurrency=self._fetch_concurrency)

    async def _rows_from_bulk_fetch(
        self,
        patients: Sequence[PatientRecord],
        activity_filter: ActivityFilter,
    ) -> list[PatientActivityData]:
        try:
            activities = await self._activity_log.list_all_activities()
        except Exception as exc:
            logger.exception("report_directory_fetch_failed report=patient_activity_bulk")
            raise ReportGenerationError() from exc

        by_patient: dict[int, list[ActivityRecord]] = defaultdict(list)
        for activity in activities:
            by_patient[activity.patient_id].append(activity)
        return [
            PatientActivityData(
                patient_id=patient.patient_id,
                patient_name=patient.full_name,
                totals=aggregate_durations(
                    by_patient.get(patient.patient_id, []),
                    activity_filter,
                    timezone=self._timezone,
                ),
            )
            for patient in patients
        ]

    def _service_sort_key(self, activity: ActivityRecord) -> tuple[int, str]:
        local = local_naive(activity.service_datetime, timezone=self._timezone)
        if local is None:
            return (1, "")
        return (0, local.isoformat())


def _group_rows_by_site(
    sites: Sequence[SiteRecord],
    patients: Sequence[PatientRecord],
    rows: Sequence[PatientActivityData],
) -> list[SitePatientData]:
    grouped: dict[str, list[PatientActivityData]] = {}
    site_ids: dict[str, int | None] = {}
    for site in sites:
        if site.name not in grouped:
            grouped[site.name] = []
            site_ids[site.name] = site.site_id
    for patient, row in zip(patients, rows, strict=True):
        grouped[patient.site_name].append(row)

    return [
        SitePatientData(
            site_name=name,
            site_id=site_ids[name],
            patients=site_rows,
            totals=sum_durations(row.totals for row in site_rows),
        )
        for name, site_rows in grouped.items()
    ]
