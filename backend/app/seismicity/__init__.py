"""
Earthquake catalogue filtering and statistics.

This package provides:
- Catalogue CSV parsing and live-feed GeoJSON normalisation
- Radius / magnitude / time-window queries
- Gutenberg-Richter frequency-magnitude analysis
- Magnitude and depth histograms, descriptive statistics, seismic energy
- Daily / hourly temporal breakdowns

All functions are pure: callers own the parsed event list and pass it in.
"""

from .models import (
    BinSpec,
    DescriptiveStats,
    EarthquakeEvent,
    GRPoint,
    HistogramBin,
    QueryParameters,
    RegressionLine,
    SourceKind,
)
from .catalogue_parser import parse_catalogue
from .feed_adapter import events_from_feed, parse_feed_feature
from .sources import RawSource, normalize
from .query_engine import filter_events, validate_query
from .gr_analyzer import (
    GRAnalysis,
    analyze_gutenberg_richter,
    correlation_coefficient,
    cumulative_counts,
    linear_regression,
)
from .statistics import (
    DEPTH_BINS,
    depth_histogram,
    descriptive_stats,
    histogram,
    magnitude_histogram,
    seismic_energy_joules,
    total_energy,
)
from .temporal import TemporalSummary, temporal_summary
from .analysis import SeismicityReport, build_report

__all__ = [
    "BinSpec",
    "DescriptiveStats",
    "EarthquakeEvent",
    "GRPoint",
    "HistogramBin",
    "QueryParameters",
    "RegressionLine",
    "SourceKind",
    "parse_catalogue",
    "events_from_feed",
    "parse_feed_feature",
    "RawSource",
    "normalize",
    "filter_events",
    "validate_query",
    "GRAnalysis",
    "analyze_gutenberg_richter",
    "correlation_coefficient",
    "cumulative_counts",
    "linear_regression",
    "DEPTH_BINS",
    "depth_histogram",
    "descriptive_stats",
    "histogram",
    "magnitude_histogram",
    "seismic_energy_joules",
    "total_energy",
    "TemporalSummary",
    "temporal_summary",
    "SeismicityReport",
    "build_report",
]
