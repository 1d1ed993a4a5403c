"""
gr_analyzer.py — Gutenberg-Richter frequency-magnitude analysis.

    log₁₀(N) = a − b·M

N is the number of events with magnitude ≥ M. The curve is sampled every
0.1 magnitude units from floor(min·10)/10 to ceil(max·10)/10 inclusive, a
least-squares line is fitted through the samples, and the b-value is the
negated slope. Steps with N = 0 are never emitted, so no point ever carries
log₁₀(0).

Degenerate inputs (fewer than two points) return ``None`` for the fit and
0 for the correlation rather than raising.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from backend.app.seismicity.models import GRPoint, RegressionLine

MAGNITUDE_STEP_TENTHS = 1

# Absorbs representation error in min·10 / max·10 (e.g. 0.7·10 = 7.000000000000001)
_TENTHS_EPS = 1e-9


def _tenths_range(magnitudes: Sequence[float]) -> Tuple[int, int]:
    lo = math.floor(min(magnitudes) * 10 + _TENTHS_EPS)
    hi = math.ceil(max(magnitudes) * 10 - _TENTHS_EPS)
    return lo, hi


def cumulative_counts(magnitudes: Sequence[float]) -> List[GRPoint]:
    """
    Cumulative counts N(≥M) as (M, log₁₀N) pairs, ascending in M.

    >>> [(p.magnitude, p.cumulative_count) for p in cumulative_counts([5.0, 6.0])][::10]
    [(5.0, 2), (6.0, 1)]
    """
    if not magnitudes:
        return []

    ordered = sorted(magnitudes)
    n = len(ordered)
    lo, hi = _tenths_range(ordered)

    points: List[GRPoint] = []
    idx = 0
    for tenths in range(lo, hi + 1, MAGNITUDE_STEP_TENTHS):
        m = tenths / 10
        while idx < n and ordered[idx] < m:
            idx += 1
        count = n - idx
        if count > 0:
            points.append(GRPoint(magnitude=m, log10_cumulative_count=math.log10(count)))
    return points


def _sums(points: Sequence[GRPoint]) -> Tuple[int, float, float, float, float, float]:
    n = len(points)
    sx = sum(p.magnitude for p in points)
    sy = sum(p.log10_cumulative_count for p in points)
    sxy = sum(p.magnitude * p.log10_cumulative_count for p in points)
    sx2 = sum(p.magnitude ** 2 for p in points)
    sy2 = sum(p.log10_cumulative_count ** 2 for p in points)
    return n, sx, sy, sxy, sx2, sy2


def linear_regression(points: Sequence[GRPoint]) -> Optional[RegressionLine]:
    """
    Ordinary least squares of log₁₀N on M.

    Returns None for fewer than two points, or when every point shares one
    magnitude (vertical line, slope undefined). The slope is reported signed.
    """
    if len(points) < 2:
        return None

    n, sx, sy, sxy, sx2, _ = _sums(points)
    denom = n * sx2 - sx * sx
    if denom == 0:
        return None

    slope = (n * sxy - sx * sy) / denom
    intercept = (sy - slope * sx) / n
    return RegressionLine(slope=slope, intercept=intercept)


def correlation_coefficient(points: Sequence[GRPoint]) -> float:
    """Pearson r of (M, log₁₀N); 0 when either series has zero variance."""
    if len(points) < 2:
        return 0.0

    n, sx, sy, sxy, sx2, sy2 = _sums(points)
    var_x = n * sx2 - sx * sx
    var_y = n * sy2 - sy * sy
    if var_x <= 0 or var_y <= 0:
        return 0.0

    r = (n * sxy - sx * sy) / math.sqrt(var_x * var_y)
    return max(-1.0, min(1.0, r))


def fit_strength(r: float) -> str:
    if abs(r) > 0.8:
        return "Strong"
    if abs(r) > 0.5:
        return "Moderate"
    return "Weak"


def trend_line(
    points: Sequence[GRPoint],
    regression: Optional[RegressionLine],
) -> List[GRPoint]:
    """Fitted line evaluated at the lowest and highest sampled magnitude."""
    if regression is None or len(points) < 2:
        return []
    lo = min(p.magnitude for p in points)
    hi = max(p.magnitude for p in points)
    return [
        GRPoint(magnitude=lo, log10_cumulative_count=regression.predict(lo)),
        GRPoint(magnitude=hi, log10_cumulative_count=regression.predict(hi)),
    ]


@dataclass(frozen=True)
class GRAnalysis:
    """Curve, fit and goodness-of-fit for one magnitude sample."""
    points: Tuple[GRPoint, ...]
    regression: Optional[RegressionLine]
    correlation: float
    trend: Tuple[GRPoint, ...]

    @property
    def b_value(self) -> Optional[float]:
        return self.regression.b_value if self.regression else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "points": [p.to_dict() for p in self.points],
            "regression": self.regression.to_dict() if self.regression else None,
            "b_value": self.b_value,
            "correlation": self.correlation,
            "fit_strength": fit_strength(self.correlation),
            "trend_line": [
                {"magnitude": p.magnitude, "log10_cumulative_count": p.log10_cumulative_count}
                for p in self.trend
            ],
        }


def analyze_gutenberg_richter(magnitudes: Sequence[float]) -> GRAnalysis:
    points = cumulative_counts(magnitudes)
    regression = linear_regression(points)
    return GRAnalysis(
        points=tuple(points),
        regression=regression,
        correlation=correlation_coefficient(points),
        trend=tuple(trend_line(points, regression)),
    )
