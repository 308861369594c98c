#!/usr/bin/env python3
"""
KSCW Calendar Export

Fetches games, trainings, events, hall closures and hall bookings from
PocketBase and writes one ICS file per export preset. Falls back to the last
good calendar when nothing could be fetched.

Usage:
  generate_calendar.py [--season] [--month YYYY-MM] [--team ID,ID] [--lang de|en]

Exit codes: 0 all calendars generated, 1 export errors, 2 bad arguments.
"""

from __future__ import annotations

import sys
from datetime import date

from kscw_calendar import CalendarFilters
from kscw_calendar.aggregate import enabled_sources
from kscw_calendar.cache import load_cached_calendar, save_to_cache
from kscw_calendar.calendar_gen import filter_for_export, write_ical
from kscw_calendar.config import AppConfig
from kscw_calendar.dates import current_season, season_date_range
from kscw_calendar.loader import CalendarData, CalendarLoader
from kscw_calendar.notify import send_export_alert
from kscw_calendar.pocketbase import PocketBaseClient
from kscw_calendar.preferences import load_preferences, save_preferences

# filename -> export preset
EXPORTS = {
    "kscw-kalender.ics": "all",
    "kscw-spiele.ics": "games",
    "kscw-heimspiele.ics": "games-home",
    "kscw-trainings.ics": "trainings",
}

USAGE = "Usage: generate_calendar.py [--season] [--month YYYY-MM] [--team ID,ID] [--lang de|en]"


def _arg_value(argv: list[str], name: str) -> str | None:
    """Value following a `--name value` flag, if present."""
    if name in argv:
        i = argv.index(name)
        if i + 1 < len(argv):
            return argv[i + 1]
    return None


def parse_month(raw: str | None) -> date:
    """First day of a YYYY-MM month; the current month when `raw` is empty.

    Raises:
        ValueError for anything that is not a real YYYY-MM month.
    """
    if not raw:
        return date.today().replace(day=1)
    try:
        year, month = raw.split("-")
        return date(int(year), int(month), 1)
    except ValueError:
        raise ValueError(f"Invalid month {raw!r}, expected YYYY-MM") from None


def load_data(loader: CalendarLoader, filters: CalendarFilters, month: date | None) -> CalendarData:
    """Load one month, or the current season when `month` is None."""
    if month is None:
        season = current_season()
        start, end = season_date_range(season)
        print(f"Loading season {season} ({start} – {end})...")
        return loader.load_window(filters, start, end)

    print(f"Loading {month.strftime('%Y-%m')}...")
    return loader.load(filters, month)


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    # Bad arguments are a usage error, not a backend outage
    month = None
    if "--season" not in argv:
        try:
            month = parse_month(_arg_value(argv, "--month"))
        except ValueError as e:
            print(f"  ERROR: {e}")
            print(USAGE)
            return 2

    cfg = AppConfig()

    prefs = load_preferences(cfg.preferences_path)
    lang = _arg_value(argv, "--lang")
    if lang and lang != prefs.language:
        prefs = prefs.with_changes(language=lang)
        save_preferences(cfg.preferences_path, prefs)

    team_ids = tuple(t for t in (_arg_value(argv, "--team") or "").split(",") if t)
    filters = CalendarFilters(team_ids=team_ids)

    client = PocketBaseClient(cfg.pb_url, token=cfg.pb_token or None, timeout=cfg.request_timeout)
    loader = CalendarLoader(client, language=prefs.language)

    output_dir = cfg.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)
    cache_dir = cfg.cache_dir

    errors: list[str] = []
    missing: list[str] = []

    try:
        data = load_data(loader, filters, month)
    except Exception as e:
        data = None
        errors.append(f"Failed to load calendar data: {e}")
        print(f"  ERROR: {errors[-1]}")

    if data is not None:
        errors.extend(f"Failed to fetch {source}: {msg}" for source, msg in data.errors.items())
        print(f"  Found {len(data.entries)} entries, {len(data.closed_dates)} closed days")

    # With every source down, keep serving the last good calendars
    everything_failed = data is None or len(data.errors) == len(enabled_sources(filters))

    for filename, preset in EXPORTS.items():
        ics_path = output_dir / filename

        if not everything_failed:
            try:
                entries = filter_for_export(data.entries, preset, team_ids)
                ics_bytes = write_ical(entries, ics_path, name=cfg.calendar_name)
                print(f"  Saved {ics_path} ({len(entries)} events)")
                save_to_cache(cache_dir, filename, ics_bytes)
                continue
            except (OSError, ValueError) as e:
                errors.append(f"Failed to write {filename}: {e}")
                print(f"  ERROR: {errors[-1]}")

        cached = load_cached_calendar(cache_dir, filename)
        if cached:
            print(f"  Using cached calendar for {filename}")
            ics_path.write_bytes(cached)
        else:
            print(f"  Warning: no cached calendar for {filename}")
            missing.append(filename)

    if errors or missing:
        print(f"\nErrors encountered: {len(errors)}")
        for err in errors:
            print(f"  - {err}")
        send_export_alert(errors, missing)
        return 1

    print("\nDone — all calendars generated successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
