"""
catalogue_parser.py — ISC-GEM style CSV catalogue → EarthquakeEvent list.

The catalogue is line-oriented, comma-separated, with a fixed column order:

    0  date (ISO-like, UTC)     7  depth (km)
    1  latitude                10  mw (moment magnitude)
    2  longitude               -1  eventid (last column)

Lines are handled as follows:
    - blank lines and ``#`` comments are skipped
    - the header row (date / lat / lon column names) is skipped
    - rows with fewer than 14 fields are skipped
    - rows whose latitude, longitude or magnitude is not a finite number
      are skipped
    - rows whose date cannot be parsed are skipped

Skipping is silent: parsing never raises for an individual bad line, and an
empty input yields an empty list.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional

from backend.app.seismicity.models import (
    EarthquakeEvent,
    SourceKind,
    format_place,
    parse_iso_datetime,
    to_epoch_ms,
)

logger = logging.getLogger(__name__)

MIN_FIELDS = 14

COL_DATE = 0
COL_LAT = 1
COL_LON = 2
COL_DEPTH = 7
COL_MAG = 10

_DATE_TOKENS = {"date", "datetime", "time"}
_LAT_TOKENS = {"lat", "latitude"}
_LON_TOKENS = {"lon", "long", "longitude"}


def _finite_float(text: str) -> Optional[float]:
    """Parse a float, returning None if missing, invalid or non-finite."""
    try:
        value = float(text)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def is_header(fields: List[str]) -> bool:
    """True when the row names the date, latitude and longitude columns."""
    tokens = {f.lower() for f in fields}
    return bool(tokens & _DATE_TOKENS and tokens & _LAT_TOKENS and tokens & _LON_TOKENS)


def parse_row(fields: List[str], ordinal: int) -> Optional[EarthquakeEvent]:
    """Convert one split, trimmed row to an event, or None if malformed."""
    if len(fields) < MIN_FIELDS:
        return None

    lat = _finite_float(fields[COL_LAT])
    lon = _finite_float(fields[COL_LON])
    mag = _finite_float(fields[COL_MAG])
    if lat is None or lon is None or mag is None:
        return None

    when = parse_iso_datetime(fields[COL_DATE])
    if when is None:
        return None

    depth = _finite_float(fields[COL_DEPTH]) or 0.0

    return EarthquakeEvent(
        magnitude=mag,
        latitude=lat,
        longitude=lon,
        depth_km=max(0.0, depth),
        timestamp_ms=to_epoch_ms(when),
        place=format_place(lat, lon),
        event_id=fields[-1] or str(ordinal),
        source=SourceKind.CATALOGUE,
    )


def parse_catalogue(text: str) -> List[EarthquakeEvent]:
    """
    Parse catalogue text into events, in file order.

    Pure function of ``text``; a new list is returned on every call.
    """
    events: List[EarthquakeEvent] = []
    skipped = 0

    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        fields = [f.strip() for f in stripped.split(",")]
        if is_header(fields):
            continue

        event = parse_row(fields, ordinal=len(events))
        if event is None:
            skipped += 1
            continue
        events.append(event)

    logger.debug(
        "Parsed catalogue: %d events, %d malformed lines skipped",
        len(events), skipped,
        extra={"event_count": len(events), "skipped": skipped},
    )
    return events
