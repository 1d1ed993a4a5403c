"""
radius_utils.py — Great-circle distance and radius pre-filtering.

Provides:
    - Haversine distance between two (lat, lon) points
    - A conservative bounding box around a search circle, used as a cheap
      rejection step before the exact Haversine check
    - Human-readable distance formatting

All distances are in **kilometers**. Coordinates are in **decimal degrees**.
Out-of-range coordinates are not validated here; callers own that.

Mathematical Foundation — Haversine Formula
============================================
Given two points P₁(φ₁, λ₁) and P₂(φ₂, λ₂):

    a = sin²(Δφ / 2) + cos(φ₁) · cos(φ₂) · sin²(Δλ / 2)
    c = 2 · atan2(√a, √(1 − a))
    d = R · c

Where:
    φ  = latitude in radians
    λ  = longitude in radians
    R  = Earth's mean radius = 6,371 km

Bounding Box
============
A search circle of radius d around (φ₀, λ₀) is a spherical cap of angular
radius δ = d / R. Its latitude extent is simply φ₀ ± δ. Its longitude extent
is NOT δ / cos(φ₀); the exact half-width is

    Δλ = asin(sin δ / cos φ₀)

and when sin δ ≥ cos φ₀ the cap contains a pole, so every longitude is
reachable. A box that crosses the antimeridian is also reported as
"any longitude" rather than being clipped.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

EARTH_RADIUS_KM: float = 6_371.0

# Widening applied to every bounding box so float rounding can never
# reject a point that Haversine would accept
_BBOX_PAD_DEG: float = 1e-6


# ---------------------------------------------------------------------------
# Haversine implementation
# ---------------------------------------------------------------------------

def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance between two points using the Haversine formula.

    Symmetric in its two points and zero for identical points.

    Examples
    --------
    >>> round(distance_km(13.0827, 80.2707, 12.9716, 77.5946), 1)
    290.2
    >>> distance_km(0.0, 0.0, 0.0, 0.0)
    0.0
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(d_phi / 2.0) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2.0) ** 2
    )
    # Rounding can push a marginally past 1 for antipodal points
    a = min(1.0, a)

    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return EARTH_RADIUS_KM * c


# ---------------------------------------------------------------------------
# Bounding-box pre-filter (fast rejection before expensive Haversine)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BoundingBox:
    """
    Rectangular superset of a search circle.

    ``min_lon`` / ``max_lon`` are ``None`` when any longitude may fall
    inside the circle (pole inside the cap, or antimeridian crossing).
    """
    min_lat: float
    max_lat: float
    min_lon: Optional[float] = None
    max_lon: Optional[float] = None

    @property
    def spans_all_longitudes(self) -> bool:
        return self.min_lon is None

    def contains(self, lat: float, lon: float) -> bool:
        """Quick rectangular check."""
        if not (self.min_lat <= lat <= self.max_lat):
            return False
        if self.min_lon is None:
            return True
        return self.min_lon <= lon <= self.max_lon


def bounding_box(center_lat: float, center_lon: float, radius_km: float) -> BoundingBox:
    """
    Compute a lat/lon box that fully contains the circle defined by
    (center, radius_km).

    Every point with ``distance_km(center, point) <= radius_km`` satisfies
    ``box.contains(point)``; the converse does not hold.
    """
    angular = radius_km / EARTH_RADIUS_KM

    if angular >= math.pi:
        return BoundingBox(min_lat=-90.0, max_lat=90.0)

    angular_deg = math.degrees(angular)
    min_lat = center_lat - angular_deg - _BBOX_PAD_DEG
    max_lat = center_lat + angular_deg + _BBOX_PAD_DEG

    if min_lat <= -90.0 or max_lat >= 90.0:
        # Cap reaches a pole
        return BoundingBox(min_lat=max(min_lat, -90.0), max_lat=min(max_lat, 90.0))

    sin_ang = math.sin(angular)
    cos_lat = math.cos(math.radians(center_lat))
    if sin_ang >= cos_lat:
        return BoundingBox(min_lat=min_lat, max_lat=max_lat)

    delta_lon = math.degrees(math.asin(sin_ang / cos_lat)) + _BBOX_PAD_DEG
    min_lon = center_lon - delta_lon
    max_lon = center_lon + delta_lon

    if min_lon < -180.0 or max_lon > 180.0:
        # Antimeridian crossing; longitude check would need to wrap
        return BoundingBox(min_lat=min_lat, max_lat=max_lat)

    return BoundingBox(min_lat=min_lat, max_lat=max_lat, min_lon=min_lon, max_lon=max_lon)


# ---------------------------------------------------------------------------
# Utility: Human-readable distance
# ---------------------------------------------------------------------------

def format_distance(km: float) -> str:
    """
    Format a distance for display.

    >>> format_distance(0.45)
    '450 m'
    >>> format_distance(290.2122)
    '290.21 km'
    """
    if km < 1.0:
        return f"{int(km * 1000)} m"
    return f"{km:.2f} km"
