"""reports-api entrypoint and HTTP route wiring."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, tzinfo

import uvicorn
from fastapi import FastAPI

from outcome_reporting.application.services.criteria_report_service import (
    CriteriaReportService,
)
from outcome_reporting.application.services.patient_activity_report_service import (
    PatientActivityReportService,
)
from outcome_reporting.config.settings import Settings, load_settings
from outcome_reporting.domain.period import ReportingPeriod
from outcome_reporting.infrastructure.db.activity_repository import SqlAlchemyActivityRepository
from outcome_reporting.infrastructure.db.patient_repository import SqlAlchemyPatientRepository
from outcome_reporting.infrastructure.db.session import create_session_factory
from outcome_reporting.infrastructure.db.site_repository import SqlAlchemySiteRepository
from outcome_reporting.infrastructure.db.status_snapshot_repository import (
    SqlAlchemyStatusSnapshotRepository,
)
from outcome_reporting.infrastructure.http.reports_router import (
    PeriodFactory,
    build_reports_router,
)
from outcome_reporting.infrastructure.logging import configure_logging

logger = logging.getLogger(__name__)


def build_report_services(
    settings: Settings,
) -> tuple[CriteriaReportService, PatientActivityReportService]:
    """Build report services with SQLAlchemy-backed read adapters."""

    session_factory = create_session_factory(settings.database_url)
    site_directory = SqlAlchemySiteRepository(session_factory)
    patient_directory = SqlAlchemyPatientRepository(session_factory)
    criteria_service = CriteriaReportService(
        site_directory=site_directory,
        patient_directory=patient_directory,
        snapshot_store=SqlAlchemyStatusSnapshotRepository(session_factory),
        timezone=settings.report_tzinfo,
        fetch_concurrency=settings.patient_fetch_concurrency,
    )
    activity_service = PatientActivityReportService(
        site_directory=site_directory,
        patient_directory=patient_directory,
        activity_log=SqlAlchemyActivityRepository(session_factory),
        timezone=settings.report_tzinfo,
        fetch_concurrency=settings.patient_fetch_concurrency,
        bulk_fetch=settings.activity_bulk_fetch,
    )
    return criteria_service, activity_service


def current_period_factory(timezone: tzinfo) -> PeriodFactory:
    """Return a callable yielding the month that contains 'now' in `timezone`."""

    def _current_period() -> ReportingPeriod:
        return ReportingPeriod.containing(datetime.now(tz=UTC), timezone=timezone)

    return _current_period


def create_app(
    *,
    criteria_service: CriteriaReportService | None = None,
    activity_service: PatientActivityReportService | None = None,
    current_period: PeriodFactory | None = None,
) -> FastAPI:
    """Create FastAPI app exposing the outcome report endpoints."""

    if criteria_service is None or activity_service is None or current_period is None:
        settings = load_settings()
        configure_logging(level=settings.log_level)
        if criteria_service is None or activity_service is None:
            built_criteria, built_activity = build_report_services(settings)
            criteria_service = criteria_service or built_criteria
            activity_service = activity_service or built_activity
        if current_period is None:
            current_period = current_period_factory(settings.report_tzinfo)
        logger.info(
            "reports_api_configured timezone=%s fetch_concurrency=%s bulk_fetch=%s",
            settings.report_timezone,
            settings.patient_fetch_concurrency,
            settings.activity_bulk_fetch,
        )

    assert criteria_service is not None
    assert activity_service is not None
    assert current_period is not None

    app = FastAPI()
    app.include_router(
        build_reports_router(
            criteria_service=criteria_service,
            activity_service=activity_service,
            current_period=current_period,
        )
    )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


def run_asgi_server(*, host: str, port: int) -> None:
    """Run reports-api as a long-lived ASGI process using application factory mode."""

    uvicorn.run(
        "apps.reports_api.main:create_app",
        host=host,
        port=port,
        factory=True,
    )


def main() -> None:
    """Run reports-api runtime process."""

    settings = load_settings()
    run_asgi_server(host=settings.reports_api_host, port=settings.reports_api_port)


if __name__ == "__main__":
    main()
