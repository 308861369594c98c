"""KSCW Calendar — shared data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

# Record sources that can be fetched, in display order
SOURCES = ("game", "training", "event", "closure", "hall")

# Filter names accepted in CalendarFilters.sources
SOURCE_FILTERS = ("game", "game-home", "game-away", "training", "event", "closure", "hall")


@dataclass(frozen=True)
class CalendarEntry:
    """A single calendar occurrence normalized from a source record."""

    id: str
    type: str
    title: str
    date: date
    start_time: str | None = None
    end_time: str | None = None
    all_day: bool = False
    location: str = ""
    team_names: tuple[str, ...] = ()
    description: str = ""
    source: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)
    game_type: str | None = None

    @property
    def date_key(self) -> str:
        return self.date.isoformat()

    @property
    def team_id(self) -> str:
        """Team relation of the source record (games: kscw_team, trainings: team)."""
        return str(self.source.get("kscw_team") or self.source.get("team") or "")


@dataclass(frozen=True)
class CalendarFilters:
    """Which sources and teams the calendar shows. Empty means everything."""

    sources: tuple[str, ...] = ()
    team_ids: tuple[str, ...] = ()

    def wants(self, name: str) -> bool:
        return not self.sources or name in self.sources

    @property
    def want_home_games(self) -> bool:
        return self.wants("game") or "game-home" in self.sources

    @property
    def want_away_games(self) -> bool:
        return self.wants("game") or "game-away" in self.sources
