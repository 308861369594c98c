"""Normalize PocketBase records (games, trainings, events, closures, hall
bookings) into CalendarEntry objects.

All functions are pure and tolerate missing optional fields and relations.
A record without a usable date can't be placed on the calendar and is
skipped with a warning.
"""

from __future__ import annotations

from typing import Any, Callable

from kscw_calendar import CalendarEntry
from kscw_calendar.dates import each_day, parse_date, parse_time, time_of, to_date_key

Record = dict[str, Any]

DEFAULT_LANGUAGE = "de"

LABELS = {
    "de": {
        "training": "Training",
        "cancelled": "Abgesagt",
        "closure": "Hallensperrung",
    },
    "en": {
        "training": "Training",
        "cancelled": "Cancelled",
        "closure": "Hall closure",
    },
}


def label(key: str, language: str = DEFAULT_LANGUAGE) -> str:
    return LABELS.get(language, LABELS[DEFAULT_LANGUAGE])[key]


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _expanded(record: Record, relation: str) -> Record:
    expand = record.get("expand")
    if not isinstance(expand, dict):
        return {}
    related = expand.get(relation)
    return related if isinstance(related, dict) else {}


def _expanded_name(record: Record, relation: str) -> str:
    return _text(_expanded(record, relation).get("name"))


def _warn_undated(kind: str, record: Record) -> None:
    print(f"  Warning: skipping {kind} {record.get('id', '?')} without a valid date")


def game_to_entry(game: Record) -> CalendarEntry | None:
    day = parse_date(game.get("date"))
    if day is None:
        _warn_undated("game", game)
        return None

    team = _expanded_name(game, "kscw_team")
    away_hall = game.get("away_hall_json")
    location = _expanded_name(game, "hall")
    if not location and isinstance(away_hall, dict):
        location = _text(away_hall.get("name"))

    description = " | ".join(p for p in (_text(game.get("league")), _text(game.get("round"))) if p)
    game_type = game.get("type") if game.get("type") in ("home", "away") else None

    return CalendarEntry(
        id=str(game.get("id", "")),
        type="game",
        title=f"{_text(game.get('home_team'))} - {_text(game.get('away_team'))}",
        date=day,
        start_time=parse_time(game.get("time")),
        end_time=None,
        all_day=False,
        location=location,
        team_names=(team,) if team else (),
        description=description,
        source=game,
        game_type=game_type,
    )


def training_to_entry(training: Record, language: str = DEFAULT_LANGUAGE) -> CalendarEntry | None:
    day = parse_date(training.get("date"))
    if day is None:
        _warn_undated("training", training)
        return None

    team = _expanded_name(training, "team")
    if training.get("cancelled"):
        description = f"{label('cancelled', language)}: {_text(training.get('cancel_reason'))}"
    else:
        description = _text(training.get("notes"))

    return CalendarEntry(
        id=str(training.get("id", "")),
        type="training",
        title=f"{label('training', language)} {team}".strip(),
        date=day,
        start_time=parse_time(training.get("start_time")),
        end_time=parse_time(training.get("end_time")),
        all_day=False,
        location=_expanded_name(training, "hall"),
        team_names=(team,) if team else (),
        description=description,
        source=training,
    )


def event_to_entry(event: Record) -> CalendarEntry | None:
    day = parse_date(event.get("start_date"))
    if day is None:
        _warn_undated("event", event)
        return None

    all_day = bool(event.get("all_day"))
    return CalendarEntry(
        id=str(event.get("id", "")),
        type="event",
        title=_text(event.get("title")),
        date=day,
        start_time=None if all_day else time_of(event.get("start_date")),
        end_time=None if all_day else time_of(event.get("end_date")),
        all_day=all_day,
        location=_text(event.get("location")),
        description=_text(event.get("description")),
        source=event,
    )


def closure_to_entries(closure: Record, language: str = DEFAULT_LANGUAGE) -> list[CalendarEntry]:
    """Expand a hall closure into one all-day entry per closed day.

    start_date and end_date are both inclusive. A closure ending before it
    starts expands to nothing.
    """
    start = parse_date(closure.get("start_date"))
    end = parse_date(closure.get("end_date")) or start
    if start is None:
        _warn_undated("closure", closure)
        return []
    if end < start:
        print(
            f"  Warning: closure {closure.get('id', '?')} ends before it starts "
            f"({to_date_key(start)} > {to_date_key(end)}), ignoring"
        )
        return []

    hall = _expanded_name(closure, "hall")
    closure_id = str(closure.get("id", ""))
    title = f"{label('closure', language)}: {hall}" if hall else label("closure", language)
    reason = _text(closure.get("reason"))

    return [
        CalendarEntry(
            id=f"{closure_id}-{to_date_key(day)}",
            type="closure",
            title=title,
            date=day,
            all_day=True,
            location=hall,
            description=reason,
            source=closure,
        )
        for day in each_day(start, end)
    ]


def hall_event_to_entry(hall_event: Record) -> CalendarEntry | None:
    """Hall booking imported from the hall administration calendar."""
    day = parse_date(hall_event.get("date"))
    if day is None:
        _warn_undated("hall event", hall_event)
        return None

    all_day = bool(hall_event.get("all_day"))
    return CalendarEntry(
        id=str(hall_event.get("id", "")),
        type="hall",
        title=_text(hall_event.get("title")),
        date=day,
        start_time=None if all_day else parse_time(hall_event.get("start_time")),
        end_time=None if all_day else parse_time(hall_event.get("end_time")),
        all_day=all_day,
        location=_text(hall_event.get("location")),
        source=hall_event,
    )


_SINGLE: dict[str, Callable[[Record], CalendarEntry | None]] = {
    "game": game_to_entry,
    "event": event_to_entry,
    "hall": hall_event_to_entry,
}


def normalize(kind: str, record: Record, language: str = DEFAULT_LANGUAGE) -> list[CalendarEntry]:
    """Normalize one record of the given source kind into zero or more entries."""
    if kind == "closure":
        return closure_to_entries(record, language)
    if kind == "training":
        entry = training_to_entry(record, language)
    elif kind in _SINGLE:
        entry = _SINGLE[kind](record)
    else:
        raise ValueError(f"Unknown record kind: {kind}")
    return [entry] if entry is not None else []
