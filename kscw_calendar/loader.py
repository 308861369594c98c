"""Fetch all calendar sources for a view and assemble the entry stream.

The enabled sources are fetched concurrently; entries are only built once
every fetch has finished. A failing source is reported in
CalendarData.errors and simply contributes no records.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Protocol

from kscw_calendar import CalendarEntry, CalendarFilters
from kscw_calendar.aggregate import build_entries, closed_dates, enabled_sources
from kscw_calendar.dates import fetch_range
from kscw_calendar.entries import DEFAULT_LANGUAGE


class RecordSource(Protocol):
    def fetch_source(
        self, source: str, start: str, end: str, team_ids: Sequence[str] = ()
    ) -> list[dict[str, Any]]: ...


@dataclass(frozen=True)
class CalendarData:
    """Everything a calendar view renders for one fetch window and filter state."""

    key: tuple
    entries: list[CalendarEntry] = field(default_factory=list)
    closed_dates: frozenset[str] = frozenset()
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


class CalendarLoader:
    """Loads calendar data and keeps the most recently requested result.

    Every load is numbered. A load that finishes after a newer one has
    started returns its data to the caller but leaves `current` alone.
    """

    def __init__(self, client: RecordSource, language: str = DEFAULT_LANGUAGE, max_workers: int = 5) -> None:
        self.client = client
        self.language = language
        self.max_workers = max_workers
        self.current: CalendarData | None = None
        self._lock = threading.Lock()
        self._generation = 0

    def load(self, filters: CalendarFilters, month: date) -> CalendarData:
        """Load the entries of one visible month."""
        start, end = fetch_range(month)
        return self._load(filters, start, end, month)

    def load_window(self, filters: CalendarFilters, start: str, end: str) -> CalendarData:
        """Load every entry between two YYYY-MM-DD keys (e.g. a whole season)."""
        return self._load(filters, start, end, None)

    def _load(self, filters: CalendarFilters, start: str, end: str, month: date | None) -> CalendarData:
        key = (start, end, month, filters)
        with self._lock:
            self._generation += 1
            generation = self._generation

        records, errors = self._fetch_all(filters, start, end)
        data = CalendarData(
            key=key,
            entries=build_entries(records, filters, month=month, language=self.language),
            closed_dates=closed_dates(records.get("closure", ())),
            errors=errors,
        )

        with self._lock:
            if generation == self._generation:
                self.current = data
        return data

    def _fetch_all(
        self, filters: CalendarFilters, start: str, end: str
    ) -> tuple[dict[str, list[dict[str, Any]]], dict[str, str]]:
        sources = enabled_sources(filters)
        records: dict[str, list[dict[str, Any]]] = {}
        errors: dict[str, str] = {}
        if not sources:
            return records, errors

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(sources))) as pool:
            futures = {
                source: pool.submit(self.client.fetch_source, source, start, end, filters.team_ids)
                for source in sources
            }
            for source, future in futures.items():
                try:
                    records[source] = future.result()
                except Exception as e:
                    print(f"  ERROR: Failed to fetch {source} records: {e}")
                    errors[source] = str(e)
                    records[source] = []

        return records, errors
