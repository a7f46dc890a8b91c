"""Group resolved patient values into per-site and global criterion tallies."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from outcome_reporting.domain.snapshot_resolver import ResolvedCriteria
from outcome_reporting.domain.tally import (
    CriteriaTallies,
    empty_tallies,
    fold_resolution,
    sum_tallies,
)


@dataclass(frozen=True)
class PatientResolution:
    """Resolved values for one patient together with its site assignment."""

    patient_id: int
    site_name: str
    resolved: ResolvedCriteria


@dataclass(frozen=True)
class SiteCriteriaTallies:
    """All criterion tallies for one site."""

    site_name: str
    site_id: int | None
    tallies: CriteriaTallies
    patient_count: int = 0


@dataclass(frozen=True)
class CriteriaAggregate:
    """Per-site tallies in directory order plus the global sum."""

    sites: list[SiteCriteriaTallies]
    totals: CriteriaTallies
    degraded_patient_ids: tuple[int, ...] = field(default_factory=tuple)


def aggregate_by_site(
    sites: Sequence[tuple[int | None, str]],
    resolutions: Iterable[PatientResolution],
    *,
    include_empty_sites: bool = True,
) -> CriteriaAggregate:
    """Fold patient resolutions into site tallies in a single pass.

    `sites` holds `(site_id, site_name)` pairs in directory order. Patients whose
    site name is not in `sites` do not contribute to any tally.
    """

    ordered_sites = _unique_by_name(sites)
    accumulators: dict[str, CriteriaTallies] = {name: empty_tallies() for _, name in ordered_sites}
    patient_counts: dict[str, int] = {name: 0 for _, name in ordered_sites}
    degraded: list[int] = []

    for resolution in resolutions:
        if resolution.resolved.degraded:
            degraded.append(resolution.patient_id)
        current = accumulators.get(resolution.site_name)
        if current is None:
            continue
        accumulators[resolution.site_name] = fold_resolution(current, resolution.resolved.values)
        patient_counts[resolution.site_name] += 1

    site_tallies = [
        SiteCriteriaTallies(
            site_name=name,
            site_id=site_id,
            tallies=accumulators[name],
            patient_count=patient_counts[name],
        )
        for site_id, name in ordered_sites
        if include_empty_sites or patient_counts[name] > 0
    ]
    return CriteriaAggregate(
        sites=site_tallies,
        totals=sum_tallies(site.tallies for site in site_tallies),
        degraded_patient_ids=tuple(degraded),
    )


def _unique_by_name(sites: Sequence[tuple[int | None, str]]) -> list[tuple[int | None, str]]:
    # Patients join to sites by name, so a repeated name is one group.
    seen: set[str] = set()
    unique: list[tuple[int | None, str]] = []
    for site_id, name in sites:
        if name in seen:
            continue
        seen.add(name)
        unique.append((site_id, name))
    return unique
