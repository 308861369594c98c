"""Thin HTTP client for the PocketBase records API, plus the per-source
queries the calendar needs.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import requests

USER_AGENT = "kscw-calendar/1.0"
PER_PAGE = 500


def date_filter(field: str, start: str, end: str) -> str:
    """Records whose `field` lies within [start, end] (YYYY-MM-DD, inclusive)."""
    return f'{field} >= "{start}" && {field} <= "{end}"'


def team_filter(base: str, team_ids: Sequence[str], field: str) -> str:
    """Narrow a filter to records related to any of the given teams."""
    if not team_ids:
        return base
    clauses = " || ".join(f'{field} = "{team_id}"' for team_id in team_ids)
    return f"{base} && ({clauses})"


def overlap_filter(start_field: str, end_field: str, start: str, end: str) -> str:
    """Records whose [start_field, end_field] interval overlaps [start, end]."""
    return f'{start_field} <= "{end}" && {end_field} >= "{start}"'


@dataclass(frozen=True)
class SourceQuery:
    """How to fetch one calendar source from PocketBase."""

    collection: str
    date_field: str
    team_field: str | None = None
    expand: str = ""
    sort: str = ""
    # Interval sources match on overlap instead of a single date field
    end_field: str | None = None

    def build_filter(self, start: str, end: str, team_ids: Sequence[str] = ()) -> str:
        if self.end_field:
            base = overlap_filter(self.date_field, self.end_field, start, end)
        else:
            base = date_filter(self.date_field, start, end)
        if self.team_field:
            base = team_filter(base, team_ids, self.team_field)
        return base


SOURCE_QUERIES: dict[str, SourceQuery] = {
    "game": SourceQuery("games", "date", team_field="kscw_team", expand="kscw_team,hall", sort="date,time"),
    "training": SourceQuery("trainings", "date", team_field="team", expand="team,hall", sort="date,start_time"),
    "event": SourceQuery("events", "start_date", sort="start_date"),
    "closure": SourceQuery("hall_closures", "start_date", expand="hall", end_field="end_date"),
    "hall": SourceQuery("hall_events", "date", sort="date,start_time"),
}


class PocketBaseClient:
    """A minimal client for listing PocketBase collection records."""

    def __init__(self, base_url: str, token: str | None = None, timeout: int = 15) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._headers = {"User-Agent": USER_AGENT}
        if token:
            self._headers["Authorization"] = token

    def get_json(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """GET base_url + path and return parsed JSON.

        Raises:
            requests.HTTPError on non-2xx responses.
        """
        url = f"{self.base_url}{path}"
        r = requests.get(url, params=params, timeout=self.timeout, headers=self._headers)
        r.raise_for_status()
        return r.json()

    def list_records(
        self,
        collection: str,
        filter: str = "",
        expand: str = "",
        sort: str = "",
    ) -> list[dict[str, Any]]:
        """Fetch every record of a collection matching the filter, across all pages."""
        params: dict[str, Any] = {"perPage": PER_PAGE}
        if filter:
            params["filter"] = filter
        if expand:
            params["expand"] = expand
        if sort:
            params["sort"] = sort

        items: list[dict[str, Any]] = []
        page = 1
        while True:
            payload = self.get_json(
                f"/api/collections/{collection}/records",
                params={**params, "page": page},
            )
            items.extend(payload.get("items") or [])
            if page >= int(payload.get("totalPages") or 1):
                return items
            page += 1

    def fetch_source(self, source: str, start: str, end: str, team_ids: Sequence[str] = ()) -> list[dict[str, Any]]:
        """Fetch the raw records of one calendar source for a date window."""
        query = SOURCE_QUERIES[source]
        return self.list_records(
            query.collection,
            filter=query.build_filter(start, end, team_ids),
            expand=query.expand,
            sort=query.sort,
        )
