"""
feed_adapter.py — USGS GeoJSON feed → EarthquakeEvent list.

USGS GeoJSON format:
    feature = {
        "type": "Feature",
        "properties": { "mag": 5.2, "place": "...", "time": 1708617600000,
                        "tsunami": 0, ... },
        "geometry": { "type": "Point", "coordinates": [lon, lat, depth_km] },
        "id": "us7000m..."
    }

Field mapping:
    magnitude    = properties.mag
    timestamp_ms = properties.time
    longitude    = coordinates[0]
    latitude     = coordinates[1]
    depth_km     = coordinates[2]   (0 when absent; negatives clamp to 0)

Features with a missing/non-finite magnitude, latitude or longitude, or a
missing time, are skipped the same way malformed catalogue lines are.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional, Union

from backend.app.seismicity.models import EarthquakeEvent, SourceKind, format_place

logger = logging.getLogger(__name__)


def _finite(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def parse_feed_feature(feature: Dict[str, Any], ordinal: int = 0) -> Optional[EarthquakeEvent]:
    """Parse a single GeoJSON feature, or return None if it is unusable."""
    if not isinstance(feature, dict):
        return None

    props = feature.get("properties") or {}
    coords = (feature.get("geometry") or {}).get("coordinates") or []
    if not isinstance(props, dict) or not isinstance(coords, (list, tuple)) or len(coords) < 2:
        return None

    mag = _finite(props.get("mag"))
    lon = _finite(coords[0])
    lat = _finite(coords[1])
    if mag is None or lat is None or lon is None:
        return None

    ts = _finite(props.get("time"))
    if ts is None:
        return None

    depth = _finite(coords[2]) if len(coords) > 2 else None

    return EarthquakeEvent(
        magnitude=mag,
        latitude=lat,
        longitude=lon,
        depth_km=max(0.0, depth or 0.0),
        timestamp_ms=int(ts),
        place=str(props.get("place") or format_place(lat, lon)),
        event_id=str(feature.get("id") or ordinal),
        tsunami=bool(props.get("tsunami") or 0),
        source=SourceKind.FEED,
    )


def events_from_feed(payload: Union[Dict[str, Any], List[Dict[str, Any]]]) -> List[EarthquakeEvent]:
    """Normalise a FeatureCollection (or a bare feature list) into events."""
    if isinstance(payload, dict):
        features = payload.get("features") or []
    else:
        features = payload or []

    events: List[EarthquakeEvent] = []
    for feat in features:
        event = parse_feed_feature(feat, ordinal=len(events))
        if event is not None:
            events.append(event)

    skipped = len(features) - len(events)
    if skipped:
        logger.debug("Skipped %d unusable feed features", skipped, extra={"skipped": skipped})
    return events
