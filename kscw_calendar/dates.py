"""Date helpers for PocketBase date strings, month windows and club seasons."""

from __future__ import annotations

import calendar
from collections.abc import Iterator
from datetime import date, datetime, timedelta


def parse_date(value: object) -> date | None:
    """Parse the date part of a PocketBase date/datetime string.

    Accepts "2025-03-01", "2025-03-01 18:00:00.000Z" and "2025-03-01T18:00:00".
    Returns None for missing or malformed values.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or len(value) < 10:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def parse_time(value: object) -> str | None:
    """Normalize "18:00" / "18:00:00" to "18:00"."""
    if not isinstance(value, str):
        return None
    value = value.strip()[:5]
    if len(value) != 5 or value[2] != ":":
        return None
    hours, minutes = value[:2], value[3:]
    if not (hours.isdigit() and minutes.isdigit()):
        return None
    if int(hours) > 23 or int(minutes) > 59:
        return None
    return value


def time_of(value: object) -> str | None:
    """Time part ("HH:MM") of a datetime string like "2025-03-01 18:00:00.000Z"."""
    if not isinstance(value, str):
        return None
    for sep in (" ", "T"):
        if sep in value:
            return parse_time(value.split(sep, 1)[1])
    return None


def to_date_key(day: date) -> str:
    return day.strftime("%Y-%m-%d")


def each_day(start: date, end: date) -> Iterator[date]:
    """Yield every day from start to end inclusive. Nothing if end < start."""
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def start_of_month(day: date) -> date:
    return day.replace(day=1)


def end_of_month(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def _add_months(day: date, months: int) -> date:
    """First day of the month `months` away from day's month."""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def fetch_range(month: date) -> tuple[str, str]:
    """Stable fetch window around a visible month.

    Months are grouped in four-month blocks starting in January, May and
    September. The window covers the block plus one month on each side, so
    navigating inside a block never changes the window.
    """
    block_start = date(month.year, (month.month - 1) // 4 * 4 + 1, 1)
    start = _add_months(block_start, -1)
    end = end_of_month(_add_months(block_start, 4))
    return to_date_key(start), to_date_key(end)


def season_year(day: date) -> int:
    """Start year of the September–May season containing day."""
    return day.year if day.month >= 9 else day.year - 1


def current_season(today: date | None = None) -> str:
    """Season label like "2025/26"."""
    year = season_year(today or date.today())
    return f"{year}/{str(year + 1)[2:]}"


def season_date_range(season: str) -> tuple[str, str]:
    """("2025-09-01", "2026-08-31") for season "2025/26"."""
    start_year = int(season.split("/")[0])
    return f"{start_year}-09-01", f"{start_year + 1}-08-31"


def season_months(start_year: int) -> list[date]:
    """First day of each season month, September through May."""
    first = date(start_year, 9, 1)
    return [_add_months(first, i) for i in range(9)]
