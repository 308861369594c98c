"""ICS calendar generation from calendar entries."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path
from zoneinfo import ZoneInfo

from icalendar import Calendar, Event

from kscw_calendar import CalendarEntry
from kscw_calendar.cache import validate_ics

PRODID = "-//KSCW Volley//Calendar//EN"
DEFAULT_CALENDAR_NAME = "KSCW Volleyball"
DEFAULT_FILENAME = "kscw-kalender.ics"
TZ_NAME = "Europe/Zurich"
UID_DOMAIN = "kscw.ch"

# Events without a known end time are assumed to last this long
DEFAULT_DURATION = timedelta(hours=2)

EXPORT_PRESETS = ("all", "games", "games-home", "trainings")


def create_calendar(
    entries: Iterable[CalendarEntry],
    name: str = DEFAULT_CALENDAR_NAME,
    tz_name: str = TZ_NAME,
) -> Calendar:
    """Create an ICS calendar with one VEVENT per entry."""
    cal = Calendar()
    cal.add("prodid", PRODID)
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("method", "PUBLISH")
    cal.add("x-wr-calname", name)
    cal.add("x-wr-timezone", tz_name)
    # Refresh interval hint for subscribed calendar clients (6 hours)
    cal.add("x-published-ttl", "PT6H")

    tz = ZoneInfo(tz_name)
    stamp = datetime.now(timezone.utc)
    for entry in entries:
        cal.add_component(_create_event(entry, tz, stamp))

    # VTIMEZONE for every TZID the events reference
    cal.add_missing_timezones()

    return cal


def _local(day: date, hhmm: str, tz: ZoneInfo) -> datetime:
    hours, minutes = hhmm.split(":")
    return datetime.combine(day, time(int(hours), int(minutes)), tzinfo=tz)


def event_times(entry: CalendarEntry, tz: ZoneInfo) -> tuple[date, date]:
    """DTSTART/DTEND values for an entry.

    All-day entries (and entries without a start time) span their date, with
    the exclusive end on the following day. Timed entries without an end time
    last DEFAULT_DURATION; an end at or before the start ends the next day.
    """
    if entry.all_day or not entry.start_time:
        return entry.date, entry.date + timedelta(days=1)

    start = _local(entry.date, entry.start_time, tz)
    if not entry.end_time:
        return start, start + DEFAULT_DURATION

    end = _local(entry.date, entry.end_time, tz)
    if end <= start:
        end += timedelta(days=1)
    return start, end


def _create_event(entry: CalendarEntry, tz: ZoneInfo, stamp: datetime) -> Event:
    """Create a calendar event from an entry."""
    event = Event()
    # Stable UID so calendar clients deduplicate repeated exports
    event.add("uid", f"{entry.id}@{UID_DOMAIN}")
    event.add("dtstamp", stamp)

    start, end = event_times(entry, tz)
    event.add("dtstart", start)
    event.add("dtend", end)

    event.add("summary", entry.title)
    if entry.location:
        event.add("location", entry.location)
    if entry.description:
        event.add("description", entry.description)
    event.add("categories", [entry.type])

    # Closures don't block time in the subscriber's calendar
    if entry.type == "closure":
        event.add("transp", "TRANSPARENT")

    return event


def generate_ical(entries: Iterable[CalendarEntry], name: str = DEFAULT_CALENDAR_NAME) -> str:
    """Serialize entries to RFC 5545 text."""
    return create_calendar(entries, name).to_ical().decode("utf-8")


def write_ical(
    entries: Iterable[CalendarEntry],
    path: Path,
    name: str = DEFAULT_CALENDAR_NAME,
) -> bytes:
    """Write entries as an .ics file (the download side effect). Returns the bytes written.

    Raises:
        ValueError if the generated calendar fails validation; nothing is written then.
    """
    ics_bytes = create_calendar(entries, name).to_ical()
    if not validate_ics(ics_bytes):
        raise ValueError("Generated ICS failed validation")
    if path.is_dir():
        path = path / DEFAULT_FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(ics_bytes)
    return ics_bytes


def _matches_preset(preset: str, entry: CalendarEntry) -> bool:
    if preset == "all":
        return True
    if preset == "games":
        return entry.type == "game"
    if preset == "games-home":
        return entry.type == "game" and entry.game_type == "home"
    if preset == "trainings":
        return entry.type == "training"
    return False


def filter_for_export(
    entries: Sequence[CalendarEntry],
    preset: str = "all",
    team_ids: Sequence[str] = (),
) -> list[CalendarEntry]:
    """Apply an export preset and optional team selection.

    Entries without a team (events, closures) are kept by the team filter.
    """
    if preset not in EXPORT_PRESETS:
        raise ValueError(f"Unknown export preset: {preset}")
    filtered = [e for e in entries if _matches_preset(preset, e)]
    if team_ids:
        filtered = [e for e in filtered if not e.team_id or e.team_id in team_ids]
    return filtered
