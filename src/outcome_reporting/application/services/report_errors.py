"""Errors raised by report-generation services."""

from __future__ import annotations


class ReportGenerationError(RuntimeError):
    """Raised when a directory read fails and no report can be produced."""

    def __init__(self, message: str = "failed to generate report") -> None:
        super().__init__(message)


class UnknownSiteError(LookupError):
    """Raised when a site report is requested for a name not in the directory."""


class UnknownPatientError(LookupError):
    """Raised when a patient report is requested for an id not in the directory."""
