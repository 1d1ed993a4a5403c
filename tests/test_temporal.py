"""
test_temporal.py — Tests for the daily / hourly temporal breakdown.

Run with:
    pytest tests/test_temporal.py -v
"""

from __future__ import annotations

from datetime import date

import pytest

from backend.app.seismicity.models import EarthquakeEvent
from backend.app.seismicity.temporal import temporal_summary

HOUR_MS = 3_600_000
DAY_MS = 24 * HOUR_MS


def _make_event(eid: str, ts: int, mag: float = 4.5) -> EarthquakeEvent:
    return EarthquakeEvent(
        magnitude=mag,
        latitude=0.0,
        longitude=0.0,
        depth_km=10.0,
        timestamp_ms=ts,
        place="0.00°, 0.00°",
        event_id=eid,
    )


class TestTemporalSummary:

    def test_timeline_sorted_by_day(self):
        events = [
            _make_event("c", 3 * DAY_MS),
            _make_event("a", 0),
            _make_event("b", 2 * HOUR_MS),
        ]
        summary = temporal_summary(events)
        assert [(d.day, d.count) for d in summary.timeline] == [
            (date(1970, 1, 1), 2),
            (date(1970, 1, 4), 1),
        ]
        assert summary.total_days == 2
        assert summary.avg_per_day == pytest.approx(1.5)

    def test_hourly_pattern_is_utc(self):
        events = [_make_event("a", 5 * HOUR_MS), _make_event("b", DAY_MS + 5 * HOUR_MS + 59_999)]
        pattern = temporal_summary(events).hourly_pattern
        assert len(pattern) == 24
        assert pattern[5] == 2
        assert sum(pattern) == 2

    def test_busiest_day_earliest_wins_ties(self):
        events = [
            _make_event("a", DAY_MS),
            _make_event("b", DAY_MS + 1),
            _make_event("c", 0),
            _make_event("d", 1),
        ]
        assert temporal_summary(events).busiest_day.day == date(1970, 1, 1)

    def test_major_events_in_time_order(self):
        events = [
            _make_event("late", 2 * DAY_MS, mag=6.0),
            _make_event("small", DAY_MS, mag=4.0),
            _make_event("early", 0, mag=5.0),
        ]
        major = temporal_summary(events, major_magnitude=5.0).major_events
        assert [e.event_id for e in major] == ["early", "late"]

    def test_input_not_reordered(self):
        events = [_make_event("b", DAY_MS), _make_event("a", 0)]
        temporal_summary(events)
        assert [e.event_id for e in events] == ["b", "a"]

    def test_pre_epoch_events(self):
        summary = temporal_summary([_make_event("old", -DAY_MS + HOUR_MS)])
        assert summary.timeline[0].day == date(1969, 12, 31)
        assert summary.hourly_pattern[1] == 1

    def test_empty(self):
        summary = temporal_summary([])
        assert summary.timeline == ()
        assert summary.total_days == 0
        assert summary.avg_per_day == 0.0
        assert summary.busiest_day is None
        assert summary.hourly_pattern == (0,) * 24

    def test_to_dict(self):
        d = temporal_summary([_make_event("a", 0, mag=5.5)]).to_dict()
        assert d["timeline"] == [{"date": "1970-01-01", "count": 1}]
        assert d["hourly_pattern"][0] == {"hour": 0, "count": 1}
        assert d["busiest_day"] == {"date": "1970-01-01", "count": 1}
        assert d["major_events"][0]["id"] == "a"
