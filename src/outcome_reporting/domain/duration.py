"""Activity duration filtering, totals and display formatting."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import tzinfo
from typing import Protocol, TypeVar

from outcome_reporting.domain.period import DateRange, ReportingPeriod, Timestamp


class ActivityLike(Protocol):
    """Minimal activity shape the duration folds read."""

    @property
    def service_datetime(self) -> Timestamp: ...

    @property
    def duration_minutes(self) -> float | None: ...

    @property
    def site_name(self) -> str | None: ...

    @property
    def building(self) -> str | None: ...


ActivityT = TypeVar("ActivityT", bound=ActivityLike)


@dataclass(frozen=True)
class ActivityFilter:
    """Predicate over activities for one aggregation call.

    A date range, when present, replaces the period filter entirely.
    """

    period: ReportingPeriod | None = None
    date_range: DateRange | None = None
    site_name: str | None = None
    building: str | None = None

    def matches(self, activity: ActivityLike, *, timezone: tzinfo) -> bool:
        if self.date_range is not None:
            if not self.date_range.contains(activity.service_datetime, timezone=timezone):
                return False
        elif self.period is not None:
            if not self.period.contains(activity.service_datetime, timezone=timezone):
                return False
        if self.site_name is not None and activity.site_name != self.site_name:
            return False
        if self.building is not None and activity.building != self.building:
            return False
        return True


@dataclass(frozen=True)
class DurationTotals:
    """Unrounded time totals for a group of activities."""

    total_minutes: float = 0.0
    activity_count: int = 0

    @property
    def total_hours(self) -> float:
        return self.total_minutes / 60

    def __add__(self, other: DurationTotals) -> DurationTotals:
        return DurationTotals(
            total_minutes=self.total_minutes + other.total_minutes,
            activity_count=self.activity_count + other.activity_count,
        )


def filter_activities(
    activities: Iterable[ActivityT],
    activity_filter: ActivityFilter,
    *,
    timezone: tzinfo,
) -> list[ActivityT]:
    """Return the activities passing `activity_filter`, preserving input order."""

    return [
        activity
        for activity in activities
        if activity_filter.matches(activity, timezone=timezone)
    ]


def total_durations(activities: Iterable[ActivityLike]) -> DurationTotals:
    """Sum durations of already-filtered activities; a missing duration counts as zero."""

    minutes = 0.0
    count = 0
    for activity in activities:
        minutes += float(activity.duration_minutes or 0.0)
        count += 1
    return DurationTotals(total_minutes=minutes, activity_count=count)


def aggregate_durations(
    activities: Iterable[ActivityLike],
    activity_filter: ActivityFilter,
    *,
    timezone: tzinfo,
) -> DurationTotals:
    """Filter then total one patient's activities."""

    return total_durations(filter_activities(activities, activity_filter, timezone=timezone))


def sum_durations(groups: Iterable[DurationTotals]) -> DurationTotals:
    """Combine group totals without going back to raw activities."""

    combined = DurationTotals()
    for group in groups:
        combined = combined + group
    return combined


def format_duration(minutes: float) -> str:
    """Render a duration as minutes below one hour and as hours from one hour up."""

    clamped = max(float(minutes), 0.0)
    if clamped < 60:
        return f"{clamped:.2f} min"
    return f"{clamped / 60:.2f} hr"


def round_for_display(value: float) -> float:
    return round(value, 2)
