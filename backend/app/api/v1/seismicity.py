"""
FastAPI seismicity endpoints.

Endpoints:
    GET  /api/v1/seismicity/catalogue          — Loaded catalogue summary
    POST /api/v1/seismicity/query              — Radius / magnitude / time filter
    POST /api/v1/seismicity/analysis           — Filter + full statistics report
    POST /api/v1/seismicity/gutenberg-richter  — GR fit for a magnitude sample
    GET  /api/v1/seismicity/energy             — Radiated energy of one event

Events come from the catalogue snapshot on ``app.state.catalogue``, or,
when the service runs against the live feed, from ``app.state.feed_client``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Tuple

from fastapi import APIRouter, Query, Request

from backend.app.api.schemas import (
    AnalysisResponse,
    EnergyResponse,
    GutenbergRichterRequest,
    QueryRequest,
    QueryResponse,
)
from backend.app.core.config import settings
from backend.app.core.errors import CatalogueUnavailableError
from backend.app.ingestion.catalogue_source import CatalogueSnapshot
from backend.app.seismicity import (
    EarthquakeEvent,
    QueryParameters,
    analyze_gutenberg_richter,
    build_report,
    filter_events,
    seismic_energy_joules,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/seismicity", tags=["seismicity"])

JOULES_PER_TONNE_TNT = 4.184e9


def get_catalogue(request: Request) -> CatalogueSnapshot:
    """The application's catalogue snapshot, or 503 if none is loaded."""
    snapshot = getattr(request.app.state, "catalogue", None)
    if snapshot is None:
        raise CatalogueUnavailableError(path=settings.CATALOGUE_PATH)
    return snapshot


async def _select(request: Request, q: QueryParameters) -> Tuple[str, int, List[EarthquakeEvent]]:
    """Run ``q`` against the configured source: (source label, scanned, matched)."""
    feed_client = getattr(request.app.state, "feed_client", None)
    if feed_client is not None:
        events = await feed_client.fetch_events(q)
        source = "usgs"
    else:
        snapshot = get_catalogue(request)
        events = snapshot.events
        source = snapshot.source

    matched = await asyncio.to_thread(filter_events, events, q)
    return source, len(events), matched


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/catalogue")
async def catalogue_summary(request: Request):
    """Source, version, size and time span of the loaded catalogue."""
    return get_catalogue(request).summary()


@router.post("/query", response_model=QueryResponse)
async def query_events(req: QueryRequest, request: Request):
    """
    Events within ``radius_km`` of the centre, at or above
    ``min_magnitude``, inside the inclusive time window.
    """
    q = req.to_query()
    source, scanned, matched = await _select(request, q)

    logger.info(
        "Query (%.3f, %.3f) r=%.0fkm M>=%.1f → %d/%d events",
        q.center_lat, q.center_lon, q.radius_km, q.min_magnitude, len(matched), scanned,
        extra={"matched": len(matched), "event_count": scanned,
               "radius_km": q.radius_km, "min_magnitude": q.min_magnitude},
    )

    return QueryResponse(
        query=q.to_dict(),
        source=source,
        total_scanned=scanned,
        matched=len(matched),
        events=[e.to_dict() for e in matched] if req.include_events else None,
    )


@router.post("/analysis", response_model=AnalysisResponse)
async def analyse_events(req: QueryRequest, request: Request):
    """
    Full statistics for the query's events.

    Returns the Gutenberg-Richter curve and fit, magnitude and depth
    histograms with descriptive statistics, energy release and the
    temporal breakdown. An empty selection yields an empty report.
    """
    q = req.to_query()
    source, _, matched = await _select(request, q)

    report = await asyncio.to_thread(
        build_report,
        matched,
        magnitude_bin_width=settings.MAGNITUDE_BIN_WIDTH,
        major_magnitude=settings.MAJOR_EVENT_MAGNITUDE,
    )
    return AnalysisResponse(query=q.to_dict(), source=source, report=report.to_dict())


@router.post("/gutenberg-richter")
async def gutenberg_richter(req: GutenbergRichterRequest):
    """Cumulative frequency-magnitude curve and b-value for ``magnitudes``."""
    return analyze_gutenberg_richter(req.magnitudes).to_dict()


@router.get("/energy", response_model=EnergyResponse)
async def energy(
    magnitude: float = Query(..., ge=-2.0, le=10.0, description="Moment magnitude"),
):
    """Radiated seismic energy, log₁₀E = 1.5M + 9.1."""
    joules = seismic_energy_joules(magnitude)
    return EnergyResponse(
        magnitude=magnitude,
        energy_joules=joules,
        tnt_equivalent_tonnes=joules / JOULES_PER_TONNE_TNT,
    )
