"""Site resolution — containers hold a site id, never the Site itself."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from pydantic import BaseModel

SiteId = int | str


class Site(BaseModel):
    """Minimal view of the site aggregate that owns containers."""

    site_id: SiteId
    domain: str = ""


class SiteRepository(Protocol):
    """Looks up sites by id."""

    def get(self, site_id: SiteId) -> Site | None: ...


class InMemorySiteRepository:
    """Dict-backed SiteRepository."""

    def __init__(self, sites: Iterable[Site] = ()) -> None:
        self._sites: dict[SiteId, Site] = {s.site_id: s for s in sites}

    def add(self, site: Site) -> None:
        """Insert or replace a site by id."""
        self._sites[site.site_id] = site

    def get(self, site_id: SiteId) -> Site | None:
        return self._sites.get(site_id)
