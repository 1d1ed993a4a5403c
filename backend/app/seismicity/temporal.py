"""
temporal.py — When did the selected events happen?

Groups events by UTC calendar day and by UTC hour of day, and lists the
major events (magnitude at or above a threshold) in time order.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple

from backend.app.seismicity.models import EarthquakeEvent

DEFAULT_MAJOR_MAGNITUDE = 5.0


@dataclass(frozen=True)
class DayCount:
    day: date
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.day.isoformat(), "count": self.count}


@dataclass(frozen=True)
class TemporalSummary:
    timeline: Tuple[DayCount, ...]      # active days only, ascending
    hourly_pattern: Tuple[int, ...]     # 24 slots, index = UTC hour
    total_days: int
    avg_per_day: float
    busiest_day: Optional[DayCount]
    major_events: Tuple[EarthquakeEvent, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timeline": [d.to_dict() for d in self.timeline],
            "hourly_pattern": [
                {"hour": hour, "count": count}
                for hour, count in enumerate(self.hourly_pattern)
            ],
            "total_days": self.total_days,
            "avg_per_day": round(self.avg_per_day, 3),
            "busiest_day": self.busiest_day.to_dict() if self.busiest_day else None,
            "major_events": [e.to_dict() for e in self.major_events],
        }


def temporal_summary(
    events: Sequence[EarthquakeEvent],
    major_magnitude: float = DEFAULT_MAJOR_MAGNITUDE,
) -> TemporalSummary:
    ordered = sorted(events, key=lambda e: e.timestamp_ms)

    per_day: Counter = Counter()
    hourly = [0] * 24
    for e in ordered:
        t = e.time
        per_day[t.date()] += 1
        hourly[t.hour] += 1

    timeline = tuple(DayCount(day, per_day[day]) for day in sorted(per_day))
    total_days = len(timeline)

    # Earliest day wins ties
    busiest: Optional[DayCount] = None
    for d in timeline:
        if busiest is None or d.count > busiest.count:
            busiest = d

    return TemporalSummary(
        timeline=timeline,
        hourly_pattern=tuple(hourly),
        total_days=total_days,
        avg_per_day=len(ordered) / total_days if total_days else 0.0,
        busiest_day=busiest,
        major_events=tuple(e for e in ordered if e.magnitude >= major_magnitude),
    )
