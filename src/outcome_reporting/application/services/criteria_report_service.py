"""Application service for monthly clinical-criteria outcome reports."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import tzinfo

from outcome_reporting.application.ports.patient_directory_port import (
    PatientDirectoryPort,
    PatientRecord,
)
from outcome_reporting.application.ports.site_directory_port import (
    SiteDirectoryPort,
    SiteRecord,
)
from outcome_reporting.application.ports.status_snapshot_store_port import (
    StatusSnapshotStorePort,
)
from outcome_reporting.application.services.bounded_gather import gather_bounded
from outcome_reporting.application.services.report_errors import (
    ReportGenerationError,
    UnknownSiteError,
)
from outcome_reporting.domain.criteria import CRITERIA_ORDER, Criterion
from outcome_reporting.domain.criteria_aggregation import (
    CriteriaAggregate,
    PatientResolution,
    aggregate_by_site,
)
from outcome_reporting.domain.period import ReportingPeriod
from outcome_reporting.domain.snapshot_resolver import (
    resolve_after_fetch_error,
    resolve_criteria,
)
from outcome_reporting.domain.tally import CriteriaTallies, CriterionTally

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SiteTally:
    """One site's tally for a single criterion."""

    site_name: str
    site_id: int | None
    tally: CriterionTally


@dataclass(frozen=True)
class CriteriaReportRow:
    """One criterion broken down by site, with the all-sites total."""

    criterion: Criterion
    per_site: list[SiteTally]
    total: CriterionTally


@dataclass(frozen=True)
class AllSitesCriteriaReport:
    """Per-criterion breakdown across every site for one period."""

    period: ReportingPeriod
    rows: list[CriteriaReportRow]
    degraded_patient_ids: tuple[int, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SiteCriteriaReport:
    """All criterion tallies for one site and period."""

    period: ReportingPeriod
    site_name: str
    site_id: int | None
    tallies: CriteriaTallies
    patient_count: int
    degraded_patient_ids: tuple[int, ...] = field(default_factory=tuple)


class CriteriaReportService:
    """Resolve each patient's status for a period and tally it per site."""

    def __init__(
        self,
        *,
        site_directory: SiteDirectoryPort,
        patient_directory: PatientDirectoryPort,
        snapshot_store: StatusSnapshotStorePort,
        timezone: tzinfo,
        fetch_concurrency: int = 8,
    ) -> None:
        self._site_directory = site_directory
        self._patient_directory = patient_directory
        self._snapshot_store = snapshot_store
        self._timezone = timezone
        self._fetch_concurrency = fetch_concurrency

    async def build_all_sites_report(
        self,
        *,
        period: ReportingPeriod,
        include_empty_sites: bool = True,
    ) -> AllSitesCriteriaReport:
        """Return every criterion's per-site tallies and global totals."""

        sites, patients = await self._load_directories(report="criteria")
        site_names = {site.name for site in sites}
        in_scope = [patient for patient in patients if patient.site_name in site_names]
        resolutions = await self._resolve_patients(in_scope, period)
        aggregate = aggregate_by_site(
            [(site.site_id, site.name) for site in sites],
            resolutions,
            include_empty_sites=include_empty_sites,
        )
        logger.info(
            "criteria_report_generated month=%s year=%s sites=%s patients=%s degraded=%s",
            period.month,
            period.year,
            len(aggregate.sites),
            len(in_scope),
            len(aggregate.degraded_patient_ids),
        )
        return AllSitesCriteriaReport(
            period=period,
            rows=_rows_by_criterion(aggregate),
            degraded_patient_ids=aggregate.degraded_patient_ids,
        )

    async def build_site_report(
        self,
        *,
        site_name: str,
        period: ReportingPeriod,
    ) -> SiteCriteriaReport:
        """Return the eight criterion tallies for one site."""

        sites, patients = await self._load_directories(report="site")
        site = _find_site(sites, site_name)
        if site is None:
            raise UnknownSiteError(f"site not found: {site_name}")

        site_patients = [patient for patient in patients if patient.site_name == site.name]
        resolutions = await self._resolve_patients(site_patients, period)
        aggregate = aggregate_by_site([(site.site_id, site.name)], resolutions)
        site_tallies = aggregate.sites[0]
        logger.info(
            "site_report_generated site=%s month=%s year=%s patients=%s degraded=%s",
            site.name,
            period.month,
            period.year,
            site_tallies.patient_count,
            len(aggregate.degraded_patient_ids),
        )
        return SiteCriteriaReport(
            period=period,
            site_name=site.name,
            site_id=site.site_id,
            tallies=site_tallies.tallies,
            patient_count=site_tallies.patient_count,
            degraded_patient_ids=aggregate.degraded_patient_ids,
        )

    async def _load_directories(
        self,
        *,
        report: str,
    ) -> tuple[list[SiteRecord], list[PatientRecord]]:
        try:
            sites = await self._site_directory.list_sites()
            patients = await self._patient_directory.list_patients()
        except Exception as exc:
            logger.exception("report_directory_fetch_failed report=%s", report)
            raise ReportGenerationError() from exc
        return sites, patients

    async def _resolve_patients(
        self,
        patients: list[PatientRecord],
        period: ReportingPeriod,
    ) -> list[PatientResolution]:
        async def _resolve(patient: PatientRecord) -> PatientResolution:
            try:
                snapshots = await self._snapshot_store.list_snapshots_for_patient(
                    patient_id=patient.patient_id
                )
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "snapshot_fetch_failed patient_id=%s error=%s",
                    patient.patient_id,
                    exc,
                )
                resolved = resolve_after_fetch_error(patient.current_flags)
            else:
                resolved = resolve_criteria(
                    snapshots,
                    patient.current_flags,
                    period,
                    timezone=self._timezone,
                )
            return PatientResolution(
                patient_id=patient.patient_id,
                site_name=patient.site_name,
                resolved=resolved,
            )

        return await gather_bounded(patients, _resolve, concurrency=self._fetch_concurrency)


def _rows_by_criterion(aggregate: CriteriaAggregate) -> list[CriteriaReportRow]:
    return [
        CriteriaReportRow(
            criterion=criterion,
            per_site=[
                SiteTally(
                    site_name=site.site_name,
                    site_id=site.site_id,
                    tally=site.tallies[criterion],
                )
                for site in aggregate.sites
            ],
            total=aggregate.totals[criterion],
        )
        for criterion in CRITERIA_ORDER
    ]


def _find_site(sites: list[SiteRecord], site_name: str) -> SiteRecord | None:
    for site in sites:
        if site.name == site_name:
            return site
    return None
