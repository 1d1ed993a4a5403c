"""
catalogue_source.py — Where the raw earthquake data comes from.

Two providers feed the pure seismicity core:

    1. Bundled catalogue (ISC-GEM CSV on disk)
       → read once at startup, parsed in one blocking call, kept as an
         immutable ``CatalogueSnapshot`` owned by the application.

    2. Live USGS FDSN event service (GeoJSON)
       → fetched per query with the query's own window, normalised through
         the feed adapter.

Error Handling Strategy
========================
    Catalogue file missing / unreadable
        → OSError propagates; the application decides whether to start
          without a catalogue.

    Live feed
        → 429: honour Retry-After (capped) and retry
        → 4xx: fail immediately
        → 5xx / network errors: retry with exponential backoff
        → After exhaustion: ExternalServiceError
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import math
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import httpx

from backend.app.core.errors import ExternalServiceError
from backend.app.seismicity.models import (
    EarthquakeEvent,
    QueryParameters,
    SourceKind,
    from_epoch_ms,
)
from backend.app.seismicity.sources import RawSource, normalize

logger = logging.getLogger(__name__)

USGS_API_URL = "https://earthquake.usgs.gov/fdsnws/event/1/query"

MAX_RETRIES = 3
RETRY_BACKOFF_BASE = 2.0  # seconds
MAX_RETRY_AFTER = 30.0    # seconds


# ═══════════════════════════════════════════════════════════════════════════
# Bundled catalogue
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CatalogueSnapshot:
    """A parsed catalogue plus the identity needed to cache against it."""
    events: Tuple[EarthquakeEvent, ...]
    version: str                 # content digest of the raw text
    source: str                  # file path or URL
    loaded_at: datetime

    @property
    def count(self) -> int:
        return len(self.events)

    def summary(self) -> Dict[str, Any]:
        times = [e.timestamp_ms for e in self.events]
        return {
            "source": self.source,
            "version": self.version,
            "event_count": self.count,
            "loaded_at": self.loaded_at.isoformat(),
            "earliest": from_epoch_ms(min(times)).isoformat() if times else None,
            "latest": from_epoch_ms(max(times)).isoformat() if times else None,
        }


def catalogue_version(text: str) -> str:
    """Deterministic short digest of the catalogue text."""
    return hashlib.md5(text.encode("utf-8")).hexdigest()[:12]


def read_catalogue_file(path: Union[str, Path]) -> str:
    """Read catalogue text; undecodable bytes are replaced, not fatal."""
    return Path(path).read_text(encoding="utf-8", errors="replace")


def snapshot_from_text(text: str, source: str = "<memory>") -> CatalogueSnapshot:
    start = time.perf_counter()
    events = normalize(RawSource.catalogue(text))
    snapshot = CatalogueSnapshot(
        events=tuple(events),
        version=catalogue_version(text),
        source=source,
        loaded_at=datetime.now(timezone.utc),
    )
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "Loaded catalogue %s: %d events (version %s) in %.1fms",
        source, snapshot.count, snapshot.version, duration_ms,
        extra={"event_count": snapshot.count, "version": snapshot.version,
               "source": source, "duration_ms": duration_ms},
    )
    return snapshot


def load_catalogue(path: Union[str, Path]) -> CatalogueSnapshot:
    """Read and parse a catalogue file in one blocking call."""
    return snapshot_from_text(read_catalogue_file(path), source=str(path))


async def load_catalogue_async(path: Union[str, Path]) -> CatalogueSnapshot:
    """``load_catalogue`` run off the event loop."""
    return await asyncio.to_thread(load_catalogue, path)


# ═══════════════════════════════════════════════════════════════════════════
# Live USGS feed
# ═══════════════════════════════════════════════════════════════════════════

def _iso_ms(ms: int) -> str:
    return from_epoch_ms(ms).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3]


def build_feed_params(q: QueryParameters, limit: int = 20000) -> Dict[str, Any]:
    """Translate a query into FDSN event-service parameters."""
    return {
        "format": "geojson",
        "latitude": q.center_lat,
        "longitude": q.center_lon,
        "maxradiuskm": q.radius_km,
        "minmagnitude": q.min_magnitude,
        "starttime": _iso_ms(q.start_ms),
        "endtime": _iso_ms(q.end_ms),
        "orderby": "time-asc",
        "limit": min(limit, 20000),
    }


def retry_after_seconds(response: httpx.Response, attempt: int) -> float:
    """
    Seconds to wait before retrying a 429, capped at ``MAX_RETRY_AFTER``.

    ``Retry-After`` may be delay-seconds or an HTTP-date; when absent or
    unreadable the usual exponential backoff applies.
    """
    value = response.headers.get("Retry-After")
    if value is None:
        return min(RETRY_BACKOFF_BASE ** attempt, MAX_RETRY_AFTER)

    try:
        seconds = float(value)
    except ValueError:
        try:
            when = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return min(RETRY_BACKOFF_BASE ** attempt, MAX_RETRY_AFTER)
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        seconds = (when - datetime.now(timezone.utc)).total_seconds()

    if math.isnan(seconds):
        return min(RETRY_BACKOFF_BASE ** attempt, MAX_RETRY_AFTER)
    return min(max(seconds, 0.0), MAX_RETRY_AFTER)


class USGSFeedClient:
    """
    Async client for the USGS FDSN event service.

    Usage:
        client = USGSFeedClient()
        events = await client.fetch_events(query)
        await client.close()
    """

    def __init__(
        self,
        base_url: str = USGS_API_URL,
        timeout: float = 30.0,
        max_retries: int = MAX_RETRIES,
        result_limit: int = 20000,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.result_limit = result_limit
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                headers={"Accept": "application/json"},
            )
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()

    async def fetch_feed(self, q: QueryParameters) -> Dict[str, Any]:
        """Fetch the raw GeoJSON FeatureCollection for ``q``."""
        params = build_feed_params(q, self.result_limit)
        last_error: Optional[Exception] = None

        for attempt in range(self.max_retries):
            try:
                client = await self._get_client()
                response = await client.get(self.base_url, params=params)
                response.raise_for_status()
                return response.json()
            except httpx.HTTPStatusError as e:
                last_error = e
                status = e.response.status_code
                if status == 429:
                    wait_time = retry_after_seconds(e.response, attempt)
                elif status >= 500:
                    wait_time = RETRY_BACKOFF_BASE ** attempt
                else:
                    raise ExternalServiceError("usgs", f"HTTP {status}", status_code=status)
                logger.warning(
                    "USGS feed HTTP %d, retrying in %.1fs (attempt %d/%d)",
                    status, wait_time, attempt + 1, self.max_retries,
                )
            except (httpx.TransportError, ValueError) as e:
                last_error = e
                wait_time = RETRY_BACKOFF_BASE ** attempt
                logger.warning(
                    "USGS feed request failed: %s, retrying in %.1fs (attempt %d/%d)",
                    e, wait_time, attempt + 1, self.max_retries,
                )
            if attempt < self.max_retries - 1:
                await asyncio.sleep(wait_time)

        raise ExternalServiceError(
            "usgs", f"all {self.max_retries} attempts failed: {last_error}",
        )

    async def fetch_events(self, q: QueryParameters) -> List[EarthquakeEvent]:
        """Fetch and normalise the live feed for ``q``."""
        payload = await self.fetch_feed(q)
        events = normalize(RawSource(SourceKind.FEED, payload))
        logger.info(
            "Fetched %d events from USGS feed", len(events),
            extra={"event_count": len(events), "source": "usgs"},
        )
        return events
