"""
Tagged raw-source union.

The two source shapes (flat CSV text, nested GeoJSON) meet here and leave as
one canonical ``EarthquakeEvent`` list. Nothing downstream of ``normalize``
sees a raw source shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from backend.app.seismicity.catalogue_parser import parse_catalogue
from backend.app.seismicity.feed_adapter import events_from_feed
from backend.app.seismicity.models import EarthquakeEvent, SourceKind

_ADAPTERS: Dict[SourceKind, Callable[[Any], List[EarthquakeEvent]]] = {
    SourceKind.CATALOGUE: parse_catalogue,
    SourceKind.FEED: events_from_feed,
}


@dataclass(frozen=True)
class RawSource:
    """Raw payload tagged with its shape: CSV text or a GeoJSON object."""
    kind: SourceKind
    payload: Any

    @classmethod
    def catalogue(cls, text: str) -> "RawSource":
        return cls(SourceKind.CATALOGUE, text)

    @classmethod
    def feed(cls, geojson: Any) -> "RawSource":
        return cls(SourceKind.FEED, geojson)


def normalize(raw: RawSource) -> List[EarthquakeEvent]:
    """Run the adapter matching ``raw.kind``."""
    try:
        adapter = _ADAPTERS[SourceKind(raw.kind)]
    except (KeyError, ValueError):
        raise ValueError(f"Unknown source kind: {raw.kind!r}")
    return adapter(raw.payload)
