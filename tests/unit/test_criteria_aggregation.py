from __future__ import annotations

import pytest

from outcome_reporting.domain.criteria import CRITERIA_ORDER, Criterion, CriterionFlags
from outcome_reporting.domain.criteria_aggregation import PatientResolution, aggregate_by_site
from outcome_reporting.domain.snapshot_resolver import (
    ResolutionSource,
    ResolvedCriteria,
    resolve_after_fetch_error,
)
from outcome_reporting.domain.tally import (
    CriterionTally,
    empty_tallies,
    fold_resolution,
    format_percentage,
    sum_tallies,
)


def _resolution(
    patient_id: int,
    site_name: str,
    *,
    source: ResolutionSource = ResolutionSource.SNAPSHOT,
    **flags: bool,
) -> PatientResolution:
    return PatientResolution(
        patient_id=patient_id,
        site_name=site_name,
        resolved=ResolvedCriteria(source=source, values=CriterionFlags(**flags).as_resolved()),
    )


@pytest.mark.parametrize(
    ("yes", "no", "expected"),
    [(0, 0, 0.0), (1, 1, 50.0), (3, 0, 100.0), (1, 2, 100 / 3)],
)
def test_tally_total_and_percentage_are_derived(yes: int, no: int, expected: float) -> None:
    tally = CriterionTally(yes=yes, no=no)

    assert tally.total == yes + no
    assert tally.percentage == pytest.approx(expected)


def test_record_returns_new_tally_without_mutating() -> None:
    original = CriterionTally()

    advanced = original.record(True).record(False).record(True)

    assert original == CriterionTally()
    assert advanced == CriterionTally(yes=2, no=1)


def test_fold_resolution_advances_every_criterion() -> None:
    values = CriterionFlags(bp_at_goal=True).as_resolved()

    tallies = fold_resolution(empty_tallies(), values)

    assert tallies[Criterion.BP_AT_GOAL] == CriterionTally(yes=1, no=0)
    for criterion in CRITERIA_ORDER:
        assert tallies[criterion].total == 1


def test_format_percentage_uses_four_places() -> None:
    assert format_percentage(CriterionTally(yes=1, no=2)) == "33.3333%"
    assert format_percentage(CriterionTally()) == "0.0000%"


def test_site_with_one_yes_and_one_no_is_fifty_percent() -> None:
    aggregate = aggregate_by_site(
        [(1, "Clinic A")],
        [
            _resolution(1, "Clinic A", a1c_at_goal=True),
            _resolution(2, "Clinic A", a1c_at_goal=False),
        ],
    )

    tally = aggregate.sites[0].tallies[Criterion.A1C_AT_GOAL]
    assert (tally.yes, tally.no, tally.total, tally.percentage) == (1, 1, 2, 50.0)


def test_empty_site_is_reported_with_zero_tally() -> None:
    aggregate = aggregate_by_site(
        [(1, "Clinic A"), (2, "Empty Clinic")],
        [_resolution(1, "Clinic A", bp_at_goal=True)],
    )

    assert [site.site_name for site in aggregate.sites] == ["Clinic A", "Empty Clinic"]
    empty = aggregate.sites[1]
    assert empty.patient_count == 0
    for criterion in CRITERIA_ORDER:
        tally = empty.tallies[criterion]
        assert (tally.yes, tally.no, tally.total, tally.percentage) == (0, 0, 0, 0.0)


def test_empty_sites_can_be_filtered_explicitly() -> None:
    aggregate = aggregate_by_site(
        [(1, "Clinic A"), (2, "Empty Clinic")],
        [_resolution(1, "Clinic A")],
        include_empty_sites=False,
    )

    assert [site.site_name for site in aggregate.sites] == ["Clinic A"]


def test_global_total_is_sum_of_sites_with_recomputed_percentage() -> None:
    resolutions = [
        _resolution(1, "Small", use_benzo=True),
        _resolution(2, "Large", use_benzo=False),
        _resolution(3, "Large", use_benzo=False),
        _resolution(4, "Large", use_benzo=False),
        _resolution(5, "Large", use_benzo=True),
    ]

    aggregate = aggregate_by_site([(1, "Small"), (2, "Large")], resolutions)

    for criterion in CRITERIA_ORDER:
        total = aggregate.totals[criterion]
        assert total.yes == sum(site.tallies[criterion].yes for site in aggregate.sites)
        assert total.no == sum(site.tallies[criterion].no for site in aggregate.sites)
        assert total.total == sum(site.tallies[criterion].total for site in aggregate.sites)

    # Averaging site percentages would give (100 + 25) / 2 = 62.5.
    assert aggregate.totals[Criterion.USE_BENZO].percentage == pytest.approx(40.0)


def test_site_order_follows_directory_order() -> None:
    aggregate = aggregate_by_site(
        [(9, "Zeta"), (1, "Alpha"), (5, "Mid")],
        [_resolution(1, "Alpha"), _resolution(2, "Zeta")],
    )

    assert [site.site_name for site in aggregate.sites] == ["Zeta", "Alpha", "Mid"]
    assert [site.site_id for site in aggregate.sites] == [9, 1, 5]


def test_patients_of_unknown_sites_do_not_contribute() -> None:
    aggregate = aggregate_by_site(
        [(1, "Clinic A")],
        [_resolution(1, "Clinic A"), _resolution(2, "Closed Clinic")],
    )

    assert aggregate.totals[Criterion.BP_AT_GOAL].total == 1


def test_repeated_site_names_are_one_group() -> None:
    aggregate = aggregate_by_site(
        [(1, "Clinic A"), (2, "Clinic A")],
        [_resolution(1, "Clinic A", bp_at_goal=True)],
    )

    assert len(aggregate.sites) == 1
    assert aggregate.totals[Criterion.BP_AT_GOAL] == CriterionTally(yes=1, no=0)


def test_degraded_resolutions_count_like_fallback_and_are_listed() -> None:
    degraded = PatientResolution(
        patient_id=7,
        site_name="Clinic A",
        resolved=resolve_after_fetch_error(CriterionFlags(use_opioids=True)),
    )

    aggregate = aggregate_by_site([(1, "Clinic A")], [degraded, _resolution(8, "Clinic A")])

    assert aggregate.degraded_patient_ids == (7,)
    assert aggregate.totals[Criterion.USE_OPIOIDS] == CriterionTally(yes=1, no=1)


def test_sum_tallies_of_nothing_is_zero() -> None:
    assert sum_tallies([]) == empty_tallies()
