"""Port for reading the site directory."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class SiteRecord:
    """Site row as returned by the directory; patients reference it by name."""

    site_id: int
    name: str
    is_active: bool = True


class SiteDirectoryPort(Protocol):
    """Async read contract for the list of sites."""

    async def list_sites(self) -> list[SiteRecord]:
        """Return all sites in the directory's natural order."""
