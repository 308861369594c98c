from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import pytest


class FakeClient:
    """Stands in for PocketBaseClient; serves canned records per source."""

    def __init__(self, records: dict[str, list[dict[str, Any]]], failing: Sequence[str] = ()) -> None:
        self.records = records
        self.failing = set(failing)
        self.calls: list[tuple[str, str, str, tuple[str, ...]]] = []

    def fetch_source(self, source: str, start: str, end: str, team_ids: Sequence[str] = ()) -> list[dict[str, Any]]:
        self.calls.append((source, start, end, tuple(team_ids)))
        if source in self.failing:
            raise ConnectionError(f"{source} backend down")
        return list(self.records.get(source, []))


@pytest.fixture
def records() -> dict[str, list[dict[str, Any]]]:
    return {
        "game": [
            {
                "id": "g1",
                "home_team": "KSC Wiedikon H1",
                "away_team": "VBC Züri Unterland",
                "kscw_team": "t1",
                "date": "2025-03-01 00:00:00.000Z",
                "time": "18:00",
                "league": "2. Liga",
                "round": "Runde 12",
                "type": "home",
                "expand": {"kscw_team": {"name": "H1"}, "hall": {"name": "Turnhalle Utogrund"}},
            },
            {
                "id": "g2",
                "home_team": "Volley Näfels",
                "away_team": "KSC Wiedikon D1",
                "kscw_team": "t2",
                "date": "2025-03-02",
                "time": "14:30:00",
                "type": "away",
                "away_hall_json": {"name": "Lintharena"},
                "expand": {"kscw_team": {"name": "D1"}},
            },
        ],
        "training": [
            {
                "id": "tr1",
                "team": "t1",
                "date": "2025-03-01",
                "start_time": "10:00",
                "end_time": "12:00",
                "notes": "Bring your own ball",
                "expand": {"team": {"name": "H1"}, "hall": {"name": "Turnhalle Sihlhölzli"}},
            },
        ],
        "event": [
            {
                "id": "ev1",
                "title": "Vereinsfest",
                "start_date": "2025-03-01 00:00:00.000Z",
                "end_date": "2025-03-01 00:00:00.000Z",
                "all_day": True,
                "location": "Clubhaus",
                "description": "Alle sind eingeladen",
            },
        ],
        "closure": [
            {
                "id": "c1",
                "start_date": "2025-03-01",
                "end_date": "2025-03-03",
                "reason": "Reinigung",
                "expand": {"hall": {"name": "Turnhalle Utogrund"}},
            },
        ],
        "hall": [],
    }


@pytest.fixture(name="FakeClient")
def fake_client_class() -> type[FakeClient]:
    return FakeClient
