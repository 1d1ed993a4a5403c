"""
analysis.py — Everything the charts need for one filtered event set.

    filtered events ─┬─ Gutenberg-Richter curve, fit, correlation
                     ├─ magnitude histogram + energy per bin + classes
                     ├─ depth histogram
                     ├─ magnitude / depth descriptive statistics
                     ├─ total radiated energy
                     └─ temporal summary

The report is plain immutable data; ``to_dict`` is the serialised shape
handed to rendering consumers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

from backend.app.seismicity.gr_analyzer import GRAnalysis, analyze_gutenberg_richter
from backend.app.seismicity.models import DescriptiveStats, EarthquakeEvent, HistogramBin
from backend.app.seismicity.statistics import (
    DEFAULT_MAGNITUDE_BIN_WIDTH,
    BinEnergy,
    depth_histogram,
    descriptive_stats,
    energy_by_bin,
    magnitude_class_counts,
    magnitude_histogram,
    total_energy,
)
from backend.app.seismicity.temporal import (
    DEFAULT_MAJOR_MAGNITUDE,
    TemporalSummary,
    temporal_summary,
)


@dataclass(frozen=True)
class SeismicityReport:
    event_count: int
    gutenberg_richter: GRAnalysis
    magnitude_bins: Tuple[HistogramBin, ...]
    depth_bins: Tuple[HistogramBin, ...]
    magnitude_stats: Optional[DescriptiveStats]
    depth_stats: Optional[DescriptiveStats]
    total_energy_joules: float
    energy_by_magnitude: Tuple[BinEnergy, ...]
    magnitude_classes: Dict[str, int]
    temporal: TemporalSummary

    @property
    def is_empty(self) -> bool:
        return self.event_count == 0

    def to_dict(self) -> Dict[str, Any]:
        n = self.event_count
        return {
            "event_count": n,
            "gutenberg_richter": self.gutenberg_richter.to_dict(),
            "magnitude_distribution": {
                "bins": [b.to_dict(total=n) for b in self.magnitude_bins],
                "stats": self.magnitude_stats.to_dict() if self.magnitude_stats else None,
                "energy_by_bin": [e.to_dict() for e in self.energy_by_magnitude],
                "classes": dict(self.magnitude_classes),
            },
            "depth_distribution": {
                "bins": [b.to_dict(total=n) for b in self.depth_bins],
                "stats": self.depth_stats.to_dict() if self.depth_stats else None,
            },
            "total_energy_joules": self.total_energy_joules,
            "temporal": self.temporal.to_dict(),
        }


def build_report(
    events: Sequence[EarthquakeEvent],
    magnitude_bin_width: float = DEFAULT_MAGNITUDE_BIN_WIDTH,
    major_magnitude: float = DEFAULT_MAJOR_MAGNITUDE,
) -> SeismicityReport:
    """Run every analysis over ``events``. An empty input gives an empty report."""
    magnitudes = [e.magnitude for e in events]
    mag_bins = magnitude_histogram(events, bin_width=magnitude_bin_width)

    return SeismicityReport(
        event_count=len(events),
        gutenberg_richter=analyze_gutenberg_richter(magnitudes),
        magnitude_bins=tuple(mag_bins),
        depth_bins=tuple(depth_histogram(events)),
        magnitude_stats=descriptive_stats(magnitudes),
        depth_stats=descriptive_stats(e.depth_km for e in events),
        total_energy_joules=total_energy(magnitudes),
        energy_by_magnitude=tuple(energy_by_bin(mag_bins)),
        magnitude_classes=magnitude_class_counts(events),
        temporal=temporal_summary(events, major_magnitude=major_magnitude),
    )
