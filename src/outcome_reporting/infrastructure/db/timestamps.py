"""Timestamp normalization for values read from timezone-aware columns."""

from __future__ import annotations

from datetime import UTC, datetime


def ensure_utc_or_none(value: datetime | None) -> datetime | None:
    """Attach UTC to naive values; SQLite drops the offset of stored timestamps."""

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
