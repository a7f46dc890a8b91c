from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime

import pytest

from outcome_reporting.domain.duration import (
    ActivityFilter,
    DurationTotals,
    aggregate_durations,
    filter_activities,
    format_duration,
    round_for_display,
    sum_durations,
)
from outcome_reporting.domain.period import DateRange, ReportingPeriod

FEBRUARY_2025 = ReportingPeriod(month=2, year=2025)


@dataclass(frozen=True)
class _Activity:
    service_datetime: datetime | str | None
    duration_minutes: float | None
    site_name: str | None = "Clinic A"
    building: str | None = None


def test_february_activities_sum_minutes_hours_and_count() -> None:
    activities = [
        _Activity(datetime(2025, 2, 3, 10, 0, tzinfo=UTC), 0.5),
        _Activity(datetime(2025, 2, 14, 11, 0, tzinfo=UTC), 15),
        _Activity(datetime(2025, 2, 27, 16, 0, tzinfo=UTC), 90),
    ]

    totals = aggregate_durations(activities, ActivityFilter(period=FEBRUARY_2025), timezone=UTC)

    assert totals.total_minutes == pytest.approx(105.5)
    assert totals.total_hours == pytest.approx(1.758, abs=1e-3)
    assert totals.activity_count == 3


def test_activity_outside_period_is_excluded_from_sum_and_count() -> None:
    activities = [
        _Activity(datetime(2025, 1, 31, 23, 0, tzinfo=UTC), 0.5),
        _Activity(datetime(2025, 2, 14, 11, 0, tzinfo=UTC), 15),
        _Activity(datetime(2025, 2, 27, 16, 0, tzinfo=UTC), 90),
    ]

    totals = aggregate_durations(activities, ActivityFilter(period=FEBRUARY_2025), timezone=UTC)

    assert totals.activity_count == 2
    assert totals.total_minutes == pytest.approx(105.0)


def test_hours_are_not_rounded_during_aggregation() -> None:
    activities = [_Activity(datetime(2025, 2, 1, tzinfo=UTC), 10)]

    totals = aggregate_durations(activities, ActivityFilter(period=FEBRUARY_2025), timezone=UTC)

    assert totals.total_hours == 10 / 60
    assert round_for_display(totals.total_hours) == 0.17


def test_date_range_supersedes_period() -> None:
    activities = [
        _Activity(datetime(2025, 1, 20, tzinfo=UTC), 5),
        _Activity(datetime(2025, 2, 5, tzinfo=UTC), 7),
    ]
    activity_filter = ActivityFilter(
        period=FEBRUARY_2025,
        date_range=DateRange(start_date=date(2025, 1, 1), end_date=date(2025, 1, 31)),
    )

    totals = aggregate_durations(activities, activity_filter, timezone=UTC)

    assert totals == DurationTotals(total_minutes=5.0, activity_count=1)


def test_date_range_end_day_is_inclusive() -> None:
    activities = [
        _Activity(datetime(2025, 2, 10, 23, 59, 59), 4),
        _Activity(datetime(2025, 2, 11, 0, 0, 0), 6),
    ]
    activity_filter = ActivityFilter(date_range=DateRange(end_date=date(2025, 2, 10)))

    assert aggregate_durations(activities, activity_filter, timezone=UTC).total_minutes == 4


def test_site_and_building_filters_apply_after_time_filter() -> None:
    activities = [
        _Activity(datetime(2025, 2, 1, tzinfo=UTC), 10, site_name="Clinic A", building="North"),
        _Activity(datetime(2025, 2, 2, tzinfo=UTC), 20, site_name="Clinic A", building="South"),
        _Activity(datetime(2025, 2, 3, tzinfo=UTC), 30, site_name="Clinic B", building="North"),
    ]
    activity_filter = ActivityFilter(
        period=FEBRUARY_2025,
        site_name="Clinic A",
        building="North",
    )

    selected = filter_activities(activities, activity_filter, timezone=UTC)

    assert selected == [activities[0]]


def test_malformed_timestamps_are_excluded_only_when_time_filtered() -> None:
    activities = [
        _Activity("garbage", 12),
        _Activity(None, 3),
        _Activity(datetime(2025, 2, 2, tzinfo=UTC), 1),
    ]

    filtered = aggregate_durations(activities, ActivityFilter(period=FEBRUARY_2025), timezone=UTC)
    unfiltered = aggregate_durations(activities, ActivityFilter(), timezone=UTC)

    assert filtered == DurationTotals(total_minutes=1.0, activity_count=1)
    assert unfiltered == DurationTotals(total_minutes=16.0, activity_count=3)


def test_missing_duration_counts_as_zero_minutes() -> None:
    activities = [_Activity(datetime(2025, 2, 2, tzinfo=UTC), None)]

    totals = aggregate_durations(activities, ActivityFilter(period=FEBRUARY_2025), timezone=UTC)

    assert totals == DurationTotals(total_minutes=0.0, activity_count=1)


def test_sum_durations_adds_group_totals() -> None:
    groups = [
        DurationTotals(total_minutes=30.0, activity_count=2),
        DurationTotals(total_minutes=45.5, activity_count=1),
        DurationTotals(),
    ]

    combined = sum_durations(groups)

    assert combined == DurationTotals(total_minutes=75.5, activity_count=3)
    assert combined.total_hours == pytest.approx(75.5 / 60)


@pytest.mark.parametrize(
    ("minutes", "expected"),
    [
        (0.5, "0.50 min"),
        (0, "0.00 min"),
        (15, "15.00 min"),
        (59.994, "59.99 min"),
        (60, "1.00 hr"),
        (90, "1.50 hr"),
        (105.5, "1.76 hr"),
        (-5, "0.00 min"),
    ],
)
def test_format_duration(minutes: float, expected: str) -> None:
    assert format_duration(minutes) == expected
