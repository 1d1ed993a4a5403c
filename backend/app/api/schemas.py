"""
Pydantic schemas for the seismicity API.

Separated from the route handlers so they are reusable across
the codebase (background jobs, tests).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from backend.app.core.config import settings
from backend.app.seismicity.models import QueryParameters, parse_iso_datetime


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class QueryRequest(BaseModel):
    """
    A radius / magnitude / time-window query.

    Dates are ISO-8601; a date-only ``end_time`` covers the whole day.
    """
    latitude: float = Field(
        ..., ge=-90.0, le=90.0,
        description="Search centre latitude in decimal degrees",
        examples=[35.68],
    )
    longitude: float = Field(
        ..., ge=-180.0, le=180.0,
        description="Search centre longitude in decimal degrees",
        examples=[139.69],
    )
    radius_km: float = Field(
        default_factory=lambda: settings.DEFAULT_RADIUS_KM, gt=0, le=20_037.5,
        description="Search radius in km (half the Earth's circumference at most)",
    )
    min_magnitude: float = Field(
        default_factory=lambda: settings.DEFAULT_MIN_MAGNITUDE, ge=-2.0, le=10.0,
        description="Minimum moment magnitude (inclusive)",
    )
    start_time: str = Field(..., description="ISO-8601 start date/time (inclusive)",
                            examples=["1990-01-01"])
    end_time: str = Field(..., description="ISO-8601 end date/time (inclusive)",
                          examples=["2020-12-31"])
    include_events: bool = Field(True, description="Return the matching events themselves")

    @field_validator("start_time", "end_time")
    @classmethod
    def _parseable_date(cls, v: str) -> str:
        if parse_iso_datetime(v) is None:
            raise ValueError(f"not an ISO-8601 date/time: {v!r}")
        return v.strip()

    @model_validator(mode="after")
    def _ordered_window(self) -> "QueryRequest":
        q = self.to_query()
        if q.start_ms > q.end_ms:
            raise ValueError("start_time must not be after end_time")
        return self

    def to_query(self) -> QueryParameters:
        return QueryParameters.from_strings(
            latitude=self.latitude,
            longitude=self.longitude,
            radius_km=self.radius_km,
            min_magnitude=self.min_magnitude,
            start_time=self.start_time,
            end_time=self.end_time,
        )


class GutenbergRichterRequest(BaseModel):
    """Magnitudes to fit directly, without a catalogue query."""
    magnitudes: List[float] = Field(
        ..., min_length=1, max_length=500_000,
        description="Magnitude sample",
        examples=[[5.0, 5.0, 6.0, 7.0]],
    )


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class QueryResponse(BaseModel):
    query: Dict[str, Any]
    source: str
    total_scanned: int
    matched: int
    events: Optional[List[Dict[str, Any]]] = None


class AnalysisResponse(BaseModel):
    query: Dict[str, Any]
    source: str
    report: Dict[str, Any]


class EnergyResponse(BaseModel):
    magnitude: float
    energy_joules: float
    tnt_equivalent_tonnes: float
