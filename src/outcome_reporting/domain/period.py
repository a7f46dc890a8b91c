"""Reporting period and date-range selectors with local-time matching."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, tzinfo

_END_OF_DAY = time(23, 59, 59, 999_000)


class InvalidReportingPeriodError(ValueError):
    """Raised when a month/year selector is outside the calendar."""


class InvalidDateRangeError(ValueError):
    """Raised when a date range has no bounds or ends before it starts."""


Timestamp = datetime | str | None


@dataclass(frozen=True)
class ReportingPeriod:
    """Calendar month selector scoping one report generation."""

    month: int
    year: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise InvalidReportingPeriodError(f"month must be within 1..12, got {self.month}")
        if not 1 <= self.year <= 9999:
            raise InvalidReportingPeriodError(f"year must be within 1..9999, got {self.year}")

    @classmethod
    def containing(cls, moment: datetime, *, timezone: tzinfo) -> ReportingPeriod:
        """Return the period whose local calendar month contains `moment`."""

        local = to_local(moment, timezone=timezone)
        return cls(month=local.month, year=local.year)

    def contains(self, value: Timestamp, *, timezone: tzinfo) -> bool:
        """Return whether a timestamp falls in this month, in local time.

        Unparseable, missing or unconvertible timestamps never match.
        """

        local = local_naive(value, timezone=timezone)
        if local is None:
            return False
        return local.month == self.month and local.year == self.year


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar-date window; either bound may be open."""

    start_date: date | None = None
    end_date: date | None = None

    def __post_init__(self) -> None:
        if self.start_date is None and self.end_date is None:
            raise InvalidDateRangeError("date range requires start_date or end_date")
        if (
            self.start_date is not None
            and self.end_date is not None
            and self.end_date < self.start_date
        ):
            raise InvalidDateRangeError("end_date must be greater than or equal to start_date")

    def contains(self, value: Timestamp, *, timezone: tzinfo) -> bool:
        """Return whether a timestamp falls inside the window, end day included."""

        local = local_naive(value, timezone=timezone)
        if local is None:
            return False
        if self.start_date is not None and local < datetime.combine(self.start_date, time.min):
            return False
        if self.end_date is not None and local > datetime.combine(self.end_date, _END_OF_DAY):
            return False
        return True


def coerce_timestamp(value: Timestamp) -> datetime | None:
    """Return a datetime for datetime or ISO-8601 input, or None when unusable."""

    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def to_local(moment: datetime, *, timezone: tzinfo) -> datetime:
    """Convert an aware timestamp to the report timezone; naive ones are already local."""

    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone)


def local_naive(value: Timestamp, *, timezone: tzinfo) -> datetime | None:
    """Return `value` as naive report-local time, or None when it cannot be placed.

    Timestamps near datetime.min/max can parse yet overflow on conversion.
    """

    moment = coerce_timestamp(value)
    if moment is None:
        return None
    try:
        return to_local(moment, timezone=timezone).replace(tzinfo=None)
    except (OverflowError, ValueError):
        return None
