"""Row mapping helpers shared by read adapters with criterion columns."""

from __future__ import annotations

import sqlalchemy as sa

from outcome_reporting.domain.criteria import CRITERIA_ORDER, CriterionFlags


def criterion_flags_from_row(row: sa.RowMapping) -> CriterionFlags:
    """Build criterion flags from a row, keeping NULL columns as missing."""

    values: dict[str, bool | None] = {}
    for criterion in CRITERIA_ORDER:
        raw = row[criterion.value]
        values[criterion.value] = None if raw is None else bool(raw)
    return CriterionFlags(**values)
