"""
statistics.py — Histogram binning, descriptive statistics, seismic energy.

Binning
=======
Magnitude bins are ``bin_width`` wide (0.5 by default), starting at
floor(min·10)/10 and continuing while the bin start is ≤ ceil(max·10)/10.
Each value goes in the half-open bin ``[lo, hi)`` containing it; the
maximum always lands inside the last bin.

Depth bins are fixed, named ranges:

    [0, 10)     Shallow
    [10, 35)    Crustal
    [35, 70)    Intermediate
    [70, 300)   Deep
    [300, ∞)    Very Deep

Median convention
=================
The median is a single element of the sorted values, never an average.
For an even count the LOWER of the two middle elements is taken, i.e.
``sorted(values)[(n - 1) // 2]``:

    descriptive_stats([1, 2, 3, 4]).median == 2     (not 2.5, not 3)

For odd counts this is the true middle. Inputs are copied before sorting;
caller lists are never reordered.

Energy
======
Radiated seismic energy (Gutenberg-Richter energy relation):

    log₁₀ E[J] = 1.5·M + 9.1
"""

from __future__ import annotations

import math
from bisect import bisect_right
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

from backend.app.seismicity.models import (
    BinSpec,
    DescriptiveStats,
    EarthquakeEvent,
    HistogramBin,
)

T = TypeVar("T")

DEFAULT_MAGNITUDE_BIN_WIDTH = 0.5
_TENTHS_EPS = 1e-9

DEPTH_BINS: tuple = (
    BinSpec(0.0, 10.0, "Shallow"),
    BinSpec(10.0, 35.0, "Crustal"),
    BinSpec(35.0, 70.0, "Intermediate"),
    BinSpec(70.0, 300.0, "Deep"),
    BinSpec(300.0, math.inf, "Very Deep"),
)

# (label, lower bound inclusive, upper bound exclusive, description)
MAGNITUDE_CLASSES: tuple = (
    ("Micro", -math.inf, 3.0, "Usually not felt"),
    ("Minor", 3.0, 4.0, "Often felt, rarely damages"),
    ("Light", 4.0, 5.0, "Noticeable shaking"),
    ("Moderate", 5.0, 6.0, "Can cause damage"),
    ("Strong", 6.0, 7.0, "Destructive in populated areas"),
    ("Major+", 7.0, math.inf, "Serious damage over large areas"),
)


def _identity(x: Any) -> float:
    return x


# ═══════════════════════════════════════════════════════════════════════════
# Histograms
# ═══════════════════════════════════════════════════════════════════════════

def _uniform_bins(values: Sequence[float], bin_width: float) -> List[BinSpec]:
    if bin_width <= 0:
        raise ValueError(f"bin_width must be positive, got {bin_width}")

    first = math.floor(min(values) * 10 + _TENTHS_EPS) / 10
    last = math.ceil(max(values) * 10 - _TENTHS_EPS) / 10

    count = int(math.floor((last - first) / bin_width + _TENTHS_EPS)) + 1
    edges = [first + i * bin_width for i in range(count + 1)]
    return [
        BinSpec(edges[i], edges[i + 1], f"{edges[i]:.1f}-{edges[i + 1]:.1f}")
        for i in range(count)
    ]


def histogram(
    items: Sequence[T],
    bin_width: float = DEFAULT_MAGNITUDE_BIN_WIDTH,
    fixed_bins: Optional[Sequence[BinSpec]] = None,
    value: Callable[[T], float] = _identity,
) -> List[HistogramBin]:
    """
    Count ``items`` into bins.

    ``items`` may be plain numbers or records; ``value`` extracts the
    binned quantity (identity by default). With ``fixed_bins`` the given
    ranges are used as-is and values outside all of them are not counted;
    otherwise uniform ``bin_width`` bins spanning the data are built.
    Each resulting bin keeps the items that fell into it as ``members``.
    """
    if fixed_bins is None and not items:
        return []

    values = [value(item) for item in items]
    specs = list(fixed_bins) if fixed_bins is not None else _uniform_bins(values, bin_width)
    buckets: List[List[T]] = [[] for _ in specs]

    if fixed_bins is None:
        lowers = [s.range_min for s in specs]
        for item, v in zip(items, values):
            idx = bisect_right(lowers, v) - 1
            buckets[min(max(idx, 0), len(specs) - 1)].append(item)
    else:
        for item, v in zip(items, values):
            for i, spec in enumerate(specs):
                if spec.range_min <= v < spec.range_max:
                    buckets[i].append(item)
                    break

    return [
        HistogramBin(
            range_min=spec.range_min,
            range_max=spec.range_max,
            label=spec.label,
            count=len(members),
            members=tuple(members),
        )
        for spec, members in zip(specs, buckets)
    ]


def magnitude_histogram(
    events: Sequence[EarthquakeEvent],
    bin_width: float = DEFAULT_MAGNITUDE_BIN_WIDTH,
) -> List[HistogramBin]:
    return histogram(events, bin_width=bin_width, value=lambda e: e.magnitude)


def depth_histogram(events: Sequence[EarthquakeEvent]) -> List[HistogramBin]:
    return histogram(events, fixed_bins=DEPTH_BINS, value=lambda e: e.depth_km)


# ═══════════════════════════════════════════════════════════════════════════
# Descriptive statistics
# ═══════════════════════════════════════════════════════════════════════════

def descriptive_stats(values: Iterable[float]) -> Optional[DescriptiveStats]:
    """
    Mean, lower-middle median, min, max and population standard deviation.

    Returns None for an empty input.
    """
    ordered = sorted(values)
    n = len(ordered)
    if n == 0:
        return None

    mean = sum(ordered) / n
    variance = sum((v - mean) ** 2 for v in ordered) / n

    return DescriptiveStats(
        count=n,
        mean=mean,
        median=ordered[(n - 1) // 2],
        min=ordered[0],
        max=ordered[-1],
        std_dev=math.sqrt(variance),
    )


# ═══════════════════════════════════════════════════════════════════════════
# Energy
# ═══════════════════════════════════════════════════════════════════════════

def seismic_energy_joules(magnitude: float) -> float:
    """
    Radiated energy of one event.

    >>> seismic_energy_joules(6.0) == 10 ** 18.1
    True
    """
    return 10 ** (1.5 * magnitude + 9.1)


def total_energy(magnitudes: Iterable[float]) -> float:
    return sum(seismic_energy_joules(m) for m in magnitudes)


@dataclass(frozen=True)
class BinEnergy:
    label: str
    count: int
    energy_joules: float

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "count": self.count, "energy_joules": self.energy_joules}


def energy_by_bin(bins: Sequence[HistogramBin]) -> List[BinEnergy]:
    """Total energy released by the events in each magnitude bin."""
    return [
        BinEnergy(
            label=b.label,
            count=b.count,
            energy_joules=total_energy(e.magnitude for e in b.members),
        )
        for b in bins
    ]


def magnitude_class_counts(events: Sequence[EarthquakeEvent]) -> Dict[str, int]:
    """Event counts per descriptive magnitude class, in class order."""
    counts = {label: 0 for label, _, _, _ in MAGNITUDE_CLASSES}
    for e in events:
        for label, lo, hi, _ in MAGNITUDE_CLASSES:
            if lo <= e.magnitude < hi:
                counts[label] += 1
                break
    return counts
