"""Tests for the PocketBase client and filter builders."""

from __future__ import annotations

import pytest
import requests

from kscw_calendar import pocketbase
from kscw_calendar.pocketbase import SOURCE_QUERIES, PocketBaseClient, date_filter, overlap_filter, team_filter


class FakeResponse:
    def __init__(self, payload: dict, status: int = 200) -> None:
        self.payload = payload
        self.status_code = status

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self) -> dict:
        return self.payload


@pytest.fixture
def fake_get(monkeypatch):
    calls = []
    pages = {}

    def get(url, params=None, timeout=None, headers=None):
        calls.append({"url": url, "params": params, "headers": headers})
        return pages.get(params["page"], FakeResponse({}, status=500))

    monkeypatch.setattr(pocketbase.requests, "get", get)
    return calls, pages


class TestFilters:
    def test_date_filter(self) -> None:
        assert date_filter("date", "2025-03-01", "2025-03-31") == 'date >= "2025-03-01" && date <= "2025-03-31"'

    def test_team_filter(self) -> None:
        assert team_filter("x", [], "team") == "x"
        assert team_filter("x", ["a", "b"], "team") == 'x && (team = "a" || team = "b")'

    def test_overlap_filter(self) -> None:
        assert overlap_filter("start_date", "end_date", "2025-03-01", "2025-03-31") == (
            'start_date <= "2025-03-31" && end_date >= "2025-03-01"'
        )

    def test_closures_ignore_team_ids(self) -> None:
        query = SOURCE_QUERIES["closure"]
        assert "team" not in query.build_filter("2025-03-01", "2025-03-31", ["t1"])

    def test_games_filter_by_kscw_team(self) -> None:
        query = SOURCE_QUERIES["game"]
        assert 'kscw_team = "t1"' in query.build_filter("2025-03-01", "2025-03-31", ["t1"])


class TestClient:
    def test_pages_through_results(self, fake_get) -> None:
        calls, pages = fake_get
        pages[1] = FakeResponse({"page": 1, "totalPages": 2, "items": [{"id": "a"}]})
        pages[2] = FakeResponse({"page": 2, "totalPages": 2, "items": [{"id": "b"}]})

        client = PocketBaseClient("https://pb.example.ch/", token="secret")
        items = client.list_records("games", filter="x", expand="hall", sort="date")

        assert [i["id"] for i in items] == ["a", "b"]
        assert calls[0]["url"] == "https://pb.example.ch/api/collections/games/records"
        assert calls[0]["params"]["expand"] == "hall"
        assert calls[0]["headers"]["Authorization"] == "secret"
        assert [c["params"]["page"] for c in calls] == [1, 2]

    def test_fetch_source_uses_query(self, fake_get) -> None:
        calls, pages = fake_get
        pages[1] = FakeResponse({"page": 1, "totalPages": 1, "items": []})

        PocketBaseClient("https://pb.example.ch").fetch_source("training", "2025-03-01", "2025-03-31")

        params = calls[0]["params"]
        assert calls[0]["url"].endswith("/collections/trainings/records")
        assert params["sort"] == "date,start_time"
        assert params["expand"] == "team,hall"
        assert "Authorization" not in calls[0]["headers"]

    def test_http_error_propagates(self, fake_get) -> None:
        with pytest.raises(requests.HTTPError):
            PocketBaseClient("https://pb.example.ch").list_records("games")
