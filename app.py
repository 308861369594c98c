"""
Flask entrypoint for the KSCW calendar subscription service.

Routes:
  - /api/ical       iCal subscription feed (text/calendar)
  - /api/calendar   entries + closed days of one month (JSON)

Query parameters:
  - source=games-home,games-away,trainings,events,closures,hall
    (empty = everything; singular names like "game" are accepted too)
  - team=ID,ID (empty = all teams)
  - month=YYYY-MM (/api/calendar only, default: current month)
  - season=2025/26 (/api/ical only, default: current season)
"""

from __future__ import annotations

import re
from dataclasses import asdict
from datetime import date

from flask import Flask, Response, jsonify, request

from kscw_calendar import SOURCE_FILTERS, CalendarEntry, CalendarFilters
from kscw_calendar.calendar_gen import generate_ical
from kscw_calendar.config import AppConfig
from kscw_calendar.dates import current_season, season_date_range
from kscw_calendar.loader import CalendarLoader
from kscw_calendar.pocketbase import PocketBaseClient

MONTH_RE = re.compile(r"^\d{4}-\d{2}$")
SEASON_RE = re.compile(r"^\d{4}/\d{2}$")

# Source names used by subscription links -> filter names
SOURCE_ALIASES = {
    "games": "game",
    "games-home": "game-home",
    "games-away": "game-away",
    "trainings": "training",
    "events": "event",
    "closures": "closure",
}


def _csv(raw: str | None) -> list[str]:
    return [x.strip() for x in (raw or "").split(",") if x.strip()]


def parse_filters(source: str | None, team: str | None) -> CalendarFilters:
    """Build filters from query params, ignoring unknown source names."""
    sources = []
    for name in _csv(source):
        name = SOURCE_ALIASES.get(name, name)
        if name in SOURCE_FILTERS and name not in sources:
            sources.append(name)
    return CalendarFilters(sources=tuple(sources), team_ids=tuple(_csv(team)))


def entry_to_dict(entry: CalendarEntry) -> dict:
    """Convert an entry to a JSON-serializable dict."""
    data = asdict(entry)
    data.pop("source")
    data["date"] = entry.date_key
    data["team_names"] = list(entry.team_names)
    data["team_id"] = entry.team_id
    return data


def create_app(cfg: AppConfig | None = None, loader: CalendarLoader | None = None) -> Flask:
    """
    App factory.

    The PocketBase client and loader are built once per process. Filters are
    parsed per request and never stored on shared objects.
    """
    cfg = cfg or AppConfig()
    if loader is None:
        client = PocketBaseClient(cfg.pb_url, token=cfg.pb_token or None, timeout=cfg.request_timeout)
        loader = CalendarLoader(client, language=cfg.language)

    app = Flask(__name__)

    def request_filters() -> CalendarFilters:
        return parse_filters(request.args.get("source"), request.args.get("team"))

    @app.get("/api/ical")
    def ical_feed():
        """Subscription feed for a whole season."""
        season = (request.args.get("season") or "").strip()
        if not SEASON_RE.match(season):
            season = current_season()
        start, end = season_date_range(season)

        data = loader.load_window(request_filters(), start, end)
        if not data.ok and not data.entries:
            return jsonify({"error": "calendar sources unavailable", "sources": data.errors}), 502

        body = generate_ical(data.entries, name=cfg.calendar_name)
        return Response(
            body,
            mimetype="text/calendar",
            headers={
                "Content-Disposition": 'inline; filename="kscw-kalender.ics"',
            },
        )

    @app.get("/api/calendar")
    def calendar_month():
        """Entries and closed days of one month."""
        raw = (request.args.get("month") or "").strip()
        if raw and not MONTH_RE.match(raw):
            return jsonify({"error": "month must be YYYY-MM"}), 400
        try:
            month = date(int(raw[:4]), int(raw[5:7]), 1) if raw else date.today().replace(day=1)
        except ValueError:
            return jsonify({"error": "month must be YYYY-MM"}), 400

        data = loader.load(request_filters(), month)
        return jsonify(
            {
                "month": month.strftime("%Y-%m"),
                "entries": [entry_to_dict(e) for e in data.entries],
                "closed_dates": sorted(data.closed_dates),
                "errors": data.errors,
            }
        )

    return app


app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=8000, debug=False)
