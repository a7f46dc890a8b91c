"""Yes/no/total/percentage tallies and the pure folds that build them."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from outcome_reporting.domain.criteria import CRITERIA_ORDER, Criterion


@dataclass(frozen=True)
class CriterionTally:
    """Summary of one criterion over a population of patients."""

    yes: int = 0
    no: int = 0

    @property
    def total(self) -> int:
        return self.yes + self.no

    @property
    def percentage(self) -> float:
        total = self.total
        return 100 * self.yes / total if total > 0 else 0.0

    def record(self, value: bool) -> CriterionTally:
        """Return a new tally with one more yes or no answer."""

        if value:
            return CriterionTally(yes=self.yes + 1, no=self.no)
        return CriterionTally(yes=self.yes, no=self.no + 1)

    def __add__(self, other: CriterionTally) -> CriterionTally:
        return CriterionTally(yes=self.yes + other.yes, no=self.no + other.no)


CriteriaTallies = dict[Criterion, CriterionTally]


def empty_tallies() -> CriteriaTallies:
    """Return a zero tally for every criterion, in report order."""

    return {criterion: CriterionTally() for criterion in CRITERIA_ORDER}


def fold_resolution(
    tallies: Mapping[Criterion, CriterionTally],
    values: Mapping[Criterion, bool],
) -> CriteriaTallies:
    """Return tallies advanced by one patient's resolved values."""

    return {
        criterion: tallies[criterion].record(bool(values.get(criterion, False)))
        for criterion in CRITERIA_ORDER
    }


def sum_tallies(groups: Iterable[Mapping[Criterion, CriterionTally]]) -> CriteriaTallies:
    """Element-wise sum of several per-criterion tallies.

    Percentages are derived from the summed counts, never averaged.
    """

    totals = empty_tallies()
    for group in groups:
        totals = {criterion: totals[criterion] + group[criterion] for criterion in CRITERIA_ORDER}
    return totals


def format_percentage(tally: CriterionTally) -> str:
    """Render a tally percentage the way spreadsheet exports show it."""

    return f"{tally.percentage:.4f}%"
