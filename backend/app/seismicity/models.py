"""
Data model for the seismicity pipeline.

Every record here is immutable (``frozen=True``). Events are built once per
catalogue load and shared read-only by every query; query parameters and the
derived structures are rebuilt per query and carry no identity beyond it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_ISO_RE = re.compile(
    r"^(\d{4})-(\d{1,2})-(\d{1,2})"
    r"(?:[T ](\d{1,2}):(\d{2})(?::(\d{2})(?:\.(\d+))?)?)?"
    r"\s*(Z|[+-]\d{2}:?\d{2})?$",
    re.IGNORECASE,
)


class SourceKind(str, Enum):
    """Shape of the raw data an event was normalised from."""
    CATALOGUE = "catalogue"  # flat ISC-GEM style CSV
    FEED = "feed"            # nested USGS GeoJSON


def parse_iso_datetime(text: str) -> Optional[datetime]:
    """
    Parse an ISO-like date/time string into an aware UTC datetime.

    Accepts ``YYYY-MM-DD``, a ``T`` or space separator, optional seconds and
    any number of fractional digits, and an optional ``Z`` / ``±HH:MM``
    suffix. Naive values are taken as UTC. Returns None when unparseable.
    """
    m = _ISO_RE.match(text.strip())
    if not m:
        return None

    year, month, day, hour, minute, second, frac, tz = m.groups()
    micros = int((frac or "0")[:6].ljust(6, "0"))

    try:
        dt = datetime(
            int(year), int(month), int(day),
            int(hour or 0), int(minute or 0), int(second or 0), micros,
            tzinfo=timezone.utc,
        )
    except ValueError:
        return None

    if tz and tz.upper() != "Z":
        sign = 1 if tz[0] == "+" else -1
        digits = tz[1:].replace(":", "")
        offset = timedelta(hours=int(digits[:2]), minutes=int(digits[2:]))
        dt = dt - sign * offset

    return dt


def is_date_only(text: str) -> bool:
    """True for a parseable value that carries no time-of-day part."""
    m = _ISO_RE.match(text.strip())
    return m is not None and m.group(4) is None


def to_epoch_ms(dt: datetime) -> int:
    """Exact integer milliseconds since the Unix epoch."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - EPOCH) // timedelta(milliseconds=1)


def from_epoch_ms(ms: int) -> datetime:
    return EPOCH + timedelta(milliseconds=ms)


def format_place(latitude: float, longitude: float) -> str:
    """Coordinate label used when a source carries no place name."""
    return f"{latitude:.2f}°, {longitude:.2f}°"


# ═══════════════════════════════════════════════════════════════════════════
# Events
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class EarthquakeEvent:
    """One catalogue event, normalised from either source shape."""
    magnitude: float        # moment magnitude, Mw
    latitude: float
    longitude: float
    depth_km: float         # >= 0, downward positive
    timestamp_ms: int       # epoch milliseconds, UTC
    place: str
    event_id: str
    tsunami: bool = False
    source: SourceKind = SourceKind.CATALOGUE

    @property
    def time(self) -> datetime:
        return from_epoch_ms(self.timestamp_ms)

    @property
    def title(self) -> str:
        return f"M {self.magnitude:.1f} - {self.place}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.event_id,
            "magnitude": self.magnitude,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "depth_km": self.depth_km,
            "timestamp_ms": self.timestamp_ms,
            "time": self.time.isoformat(),
            "place": self.place,
            "title": self.title,
            "tsunami": self.tsunami,
            "source": self.source.value,
        }


# ═══════════════════════════════════════════════════════════════════════════
# Query
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class QueryParameters:
    """
    Spatial, temporal and magnitude window for one query.

    Time bounds are inclusive. Construction does not validate; the query
    engine does, so a malformed query always fails the same way.
    """
    center_lat: float
    center_lon: float
    radius_km: float
    min_magnitude: float
    start_ms: int
    end_ms: int

    @classmethod
    def from_strings(
        cls,
        latitude: Any,
        longitude: Any,
        radius_km: Any,
        min_magnitude: Any,
        start_time: str,
        end_time: str,
    ) -> "QueryParameters":
        """
        Build parameters from form-style string values.

        A date-only ``end_time`` covers that whole day (through
        23:59:59.999 UTC). Unparseable dates raise ``ValueError``.
        """
        start = parse_iso_datetime(start_time)
        end = parse_iso_datetime(end_time)
        if start is None:
            raise ValueError(f"Unparseable start_time: {start_time!r}")
        if end is None:
            raise ValueError(f"Unparseable end_time: {end_time!r}")

        end_ms = to_epoch_ms(end)
        if is_date_only(end_time):
            end_ms += 86_400_000 - 1

        return cls(
            center_lat=float(latitude),
            center_lon=float(longitude),
            radius_km=float(radius_km),
            min_magnitude=float(min_magnitude),
            start_ms=to_epoch_ms(start),
            end_ms=end_ms,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "center_lat": self.center_lat,
            "center_lon": self.center_lon,
            "radius_km": self.radius_km,
            "min_magnitude": self.min_magnitude,
            "start_ms": self.start_ms,
            "end_ms": self.end_ms,
        }


# ═══════════════════════════════════════════════════════════════════════════
# Derived structures
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class GRPoint:
    """One step of the cumulative frequency-magnitude curve."""
    magnitude: float
    log10_cumulative_count: float

    @property
    def cumulative_count(self) -> int:
        return int(round(10 ** self.log10_cumulative_count))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "magnitude": round(self.magnitude, 1),
            "log10_cumulative_count": self.log10_cumulative_count,
            "cumulative_count": self.cumulative_count,
        }


@dataclass(frozen=True)
class RegressionLine:
    """Least-squares fit of log10(N) on magnitude."""
    slope: float
    intercept: float

    @property
    def b_value(self) -> float:
        """Gutenberg-Richter b-value (negated slope)."""
        return -self.slope

    def predict(self, magnitude: float) -> float:
        return self.slope * magnitude + self.intercept

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slope": self.slope,
            "intercept": self.intercept,
            "b_value": self.b_value,
        }


@dataclass(frozen=True)
class BinSpec:
    """Half-open ``[range_min, range_max)`` range with a display label."""
    range_min: float
    range_max: float
    label: str


@dataclass(frozen=True)
class HistogramBin:
    """Counted bin; ``members`` are the items that fell into it."""
    range_min: float
    range_max: float
    label: str
    count: int
    members: Tuple[Any, ...] = field(default=(), repr=False)

    def to_dict(self, total: Optional[int] = None) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "range_min": self.range_min,
            "range_max": None if self.range_max == float("inf") else self.range_max,
            "label": self.label,
            "count": self.count,
        }
        if total is not None:
            d["percentage"] = round(100.0 * self.count / total, 1) if total else 0.0
        return d


@dataclass(frozen=True)
class DescriptiveStats:
    """Summary statistics; ``median`` uses the lower-middle convention."""
    count: int
    mean: float
    median: float
    min: float
    max: float
    std_dev: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "mean": self.mean,
            "median": self.median,
            "min": self.min,
            "max": self.max,
            "std_dev": self.std_dev,
        }
