"""Merge normalized entries into one sorted calendar stream.

The pipeline runs on every data change: normalize -> expand closures ->
merge -> sort. Nothing is cached or mutated in place; inputs are one fetch
window at a time.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import date
from typing import Any

from kscw_calendar import SOURCES, CalendarEntry, CalendarFilters
from kscw_calendar.dates import each_day, end_of_month, parse_date, start_of_month, to_date_key
from kscw_calendar.entries import DEFAULT_LANGUAGE, normalize


def sort_key(entry: CalendarEntry) -> tuple[str, int, str]:
    """Date ascending, then all-day before timed, then start time ("" first)."""
    return entry.date_key, 0 if entry.all_day else 1, entry.start_time or ""


def merge_entries(*groups: Iterable[CalendarEntry]) -> list[CalendarEntry]:
    """Merge entry groups into a single sorted list. Performs no filtering."""
    merged = [entry for group in groups for entry in group]
    merged.sort(key=sort_key)
    return merged


def enabled_sources(filters: CalendarFilters) -> tuple[str, ...]:
    """Record sources that need to be fetched for a filter state."""
    enabled = []
    for source in SOURCES:
        if source == "game":
            if filters.want_home_games or filters.want_away_games:
                enabled.append(source)
        elif filters.wants(source):
            enabled.append(source)
    return tuple(enabled)


def _keep_game(entry: CalendarEntry, filters: CalendarFilters) -> bool:
    home, away = filters.want_home_games, filters.want_away_games
    if home and away:
        return True
    if home:
        return entry.game_type == "home"
    return away and entry.game_type == "away"


def build_entries(
    records: Mapping[str, Sequence[dict[str, Any]]],
    filters: CalendarFilters | None = None,
    month: date | None = None,
    language: str = DEFAULT_LANGUAGE,
) -> list[CalendarEntry]:
    """Normalize records of every enabled source and return the sorted stream.

    records maps a source name ("game", "training", ...) to its raw records.
    With month set, only entries inside that calendar month are kept.
    """
    filters = filters or CalendarFilters()
    groups: list[list[CalendarEntry]] = []

    for source in enabled_sources(filters):
        entries = [e for record in records.get(source, ()) for e in normalize(source, record, language)]
        if source == "game":
            entries = [e for e in entries if _keep_game(e, filters)]
        groups.append(entries)

    if month is not None:
        first, last = start_of_month(month), end_of_month(month)
        groups = [[e for e in group if first <= e.date <= last] for group in groups]

    return merge_entries(*groups)


def closed_dates(closures: Iterable[dict[str, Any]]) -> frozenset[str]:
    """Every YYYY-MM-DD day covered by any closure.

    Built straight from the closure records, independent of entry output.
    """
    days: set[str] = set()
    for closure in closures:
        start = parse_date(closure.get("start_date"))
        if start is None:
            continue
        end = parse_date(closure.get("end_date")) or start
        days.update(to_date_key(day) for day in each_day(start, end))
    return frozenset(days)
