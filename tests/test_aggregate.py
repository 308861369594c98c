"""Tests for merging, sorting and the closed-date set."""

from __future__ import annotations

from datetime import date

from kscw_calendar import CalendarEntry, CalendarFilters
from kscw_calendar.aggregate import build_entries, closed_dates, enabled_sources, merge_entries, sort_key


def _entry(id: str, day: date, start: str | None = None, all_day: bool = False) -> CalendarEntry:
    return CalendarEntry(id=id, type="event", title=id, date=day, start_time=start, all_day=all_day)


class TestMerge:
    def test_total_order(self) -> None:
        a = _entry("late", date(2025, 3, 1), "20:00")
        b = _entry("allday", date(2025, 3, 1), all_day=True)
        c = _entry("early", date(2025, 3, 1), "08:00")
        d = _entry("next-day", date(2025, 3, 2), "07:00")
        e = _entry("prev-day", date(2025, 2, 28), "23:00")
        merged = merge_entries([a, d], [b], [c, e])
        assert [x.id for x in merged] == ["prev-day", "allday", "early", "late", "next-day"]

    def test_missing_start_time_sorts_first_among_timed(self) -> None:
        untimed = _entry("untimed", date(2025, 3, 1))
        timed = _entry("timed", date(2025, 3, 1), "09:00")
        assert [x.id for x in merge_entries([timed, untimed])] == ["untimed", "timed"]

    def test_output_is_sorted_for_pipeline(self, records) -> None:
        entries = build_entries(records)
        keys = [sort_key(e) for e in entries]
        assert keys == sorted(keys)

    def test_does_not_filter(self) -> None:
        groups = [[_entry(str(i), date(2025, 1, i + 1))] for i in range(5)]
        assert len(merge_entries(*groups)) == 5


class TestBuildEntries:
    def test_all_sources(self, records) -> None:
        entries = build_entries(records)
        assert len(entries) == 2 + 1 + 1 + 3
        first_day = [e for e in entries if e.date_key == "2025-03-01"]
        # All-day entries first, then by start time
        assert [e.all_day for e in first_day] == [True, True, False, False]
        assert [e.start_time for e in first_day[2:]] == ["10:00", "18:00"]

    def test_home_games_only(self, records) -> None:
        entries = build_entries(records, CalendarFilters(sources=("game-home",)))
        assert [e.id for e in entries] == ["g1"]

    def test_away_games_only(self, records) -> None:
        entries = build_entries(records, CalendarFilters(sources=("game-away", "closure")))
        assert {e.type for e in entries} == {"game", "closure"}
        assert [e.id for e in entries if e.type == "game"] == ["g2"]

    def test_month_window(self, records) -> None:
        records = dict(records)
        records["event"] = records["event"] + [{"id": "ev9", "title": "Saisonstart", "start_date": "2025-04-01", "all_day": True}]
        entries = build_entries(records, month=date(2025, 3, 1))
        assert "ev9" not in {e.id for e in entries}

    def test_disabled_sources_are_not_normalized(self, records) -> None:
        entries = build_entries(records, CalendarFilters(sources=("training",)))
        assert {e.type for e in entries} == {"training"}


class TestEnabledSources:
    def test_empty_filter_enables_everything(self) -> None:
        assert enabled_sources(CalendarFilters()) == ("game", "training", "event", "closure", "hall")

    def test_game_split_enables_games(self) -> None:
        assert enabled_sources(CalendarFilters(sources=("game-away",))) == ("game",)


class TestClosedDates:
    def test_covers_every_day(self, records) -> None:
        assert closed_dates(records["closure"]) == {"2025-03-01", "2025-03-02", "2025-03-03"}

    def test_overlapping_closures_count_once(self) -> None:
        closures = [
            {"id": "a", "start_date": "2025-03-01", "end_date": "2025-03-02"},
            {"id": "b", "start_date": "2025-03-02", "end_date": "2025-03-02"},
        ]
        days = closed_dates(closures)
        assert sorted(days) == ["2025-03-01", "2025-03-02"]

    def test_reversed_and_undated_closures_add_nothing(self) -> None:
        closures = [
            {"id": "a", "start_date": "2025-03-05", "end_date": "2025-03-01"},
            {"id": "b", "start_date": None},
        ]
        assert closed_dates(closures) == frozenset()
