"""
query_engine.py — Magnitude, time window and radius filtering.

One pass over the event list keeps the events for which all of these hold:

    1. event.magnitude >= q.min_magnitude
    2. q.start_ms <= event.timestamp_ms <= q.end_ms
    3. distance_km(center, event) <= q.radius_km

The cheap scalar comparisons run first, then the bounding box, and only the
survivors pay for a Haversine evaluation. Output order follows input order.

Malformed parameters raise ``ValidationError`` before any event is looked
at. An empty result is a normal outcome and is returned as an empty list.
"""

from __future__ import annotations

import logging
import math
from typing import List, Sequence

from backend.app.core.errors import ValidationError
from backend.app.seismicity.models import EarthquakeEvent, QueryParameters
from backend.app.spatial.radius_utils import bounding_box, distance_km

logger = logging.getLogger(__name__)


def validate_query(q: QueryParameters) -> None:
    """Raise ``ValidationError`` if ``q`` cannot describe a real query."""
    if not math.isfinite(q.center_lat):
        raise ValidationError("center latitude must be a finite number", field="center_lat",
                              value=str(q.center_lat))
    if not math.isfinite(q.center_lon):
        raise ValidationError("center longitude must be a finite number", field="center_lon",
                              value=str(q.center_lon))
    if not math.isfinite(q.min_magnitude):
        raise ValidationError("minimum magnitude must be a finite number", field="min_magnitude",
                              value=str(q.min_magnitude))
    if not q.radius_km > 0:
        raise ValidationError("radius must be positive", field="radius_km",
                              value=str(q.radius_km))
    if q.start_ms > q.end_ms:
        raise ValidationError(
            "start time must not be after end time", field="start_ms",
            start_ms=q.start_ms, end_ms=q.end_ms,
        )


def filter_events(events: Sequence[EarthquakeEvent], q: QueryParameters) -> List[EarthquakeEvent]:
    """Return the order-preserving subsequence of ``events`` matching ``q``."""
    validate_query(q)

    box = bounding_box(q.center_lat, q.center_lon, q.radius_km)
    matched: List[EarthquakeEvent] = []

    for event in events:
        if event.magnitude < q.min_magnitude:
            continue
        if not (q.start_ms <= event.timestamp_ms <= q.end_ms):
            continue
        if not box.contains(event.latitude, event.longitude):
            continue
        if distance_km(q.center_lat, q.center_lon, event.latitude, event.longitude) <= q.radius_km:
            matched.append(event)

    logger.debug(
        "Query matched %d of %d events", len(matched), len(events),
        extra={"matched": len(matched), "event_count": len(events),
               "radius_km": q.radius_km, "min_magnitude": q.min_magnitude},
    )
    return matched
