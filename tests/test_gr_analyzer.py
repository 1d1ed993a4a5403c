"""
test_gr_analyzer.py — Tests for Gutenberg-Richter frequency-magnitude analysis.

Covers:
    • Cumulative counts on the 0.1-magnitude grid
    • Least-squares regression and b-value
    • Pearson correlation and fit strength
    • Degenerate inputs (empty, single point, constant magnitudes)

Run with:
    pytest tests/test_gr_analyzer.py -v
"""

from __future__ import annotations

import math

import pytest

from backend.app.seismicity.gr_analyzer import (
    analyze_gutenberg_richter,
    correlation_coefficient,
    cumulative_counts,
    fit_strength,
    linear_regression,
    trend_line,
)
from backend.app.seismicity.models import GRPoint


def _points(pairs):
    return [GRPoint(magnitude=m, log10_cumulative_count=y) for m, y in pairs]


def _by_magnitude(points):
    return {round(p.magnitude, 1): p for p in points}


# ═══════════════════════════════════════════════════════════════════════════
# Section 1: Cumulative counts
# ═══════════════════════════════════════════════════════════════════════════

class TestCumulativeCounts:

    def test_reference_sample(self):
        points = _by_magnitude(cumulative_counts([5.0, 5.0, 6.0, 7.0]))
        assert points[5.0].cumulative_count == 4
        assert points[6.0].cumulative_count == 2
        assert points[7.0].cumulative_count == 1
        assert points[5.0].log10_cumulative_count == pytest.approx(math.log10(4))
        assert points[6.0].log10_cumulative_count == pytest.approx(math.log10(2))
        assert points[7.0].log10_cumulative_count == 0.0

    def test_grid_spans_floor_to_ceil(self):
        points = cumulative_counts([5.0, 5.0, 6.0, 7.0])
        assert len(points) == 21
        assert points[0].magnitude == 5.0
        assert points[-1].magnitude == 7.0

    def test_step_is_one_tenth(self):
        points = cumulative_counts([4.0, 5.0])
        mags = [p.magnitude for p in points]
        for a, b in zip(mags, mags[1:]):
            assert b - a == pytest.approx(0.1)

    def test_non_grid_extremes(self):
        points = cumulative_counts([4.23, 4.87])
        assert points[0].magnitude == pytest.approx(4.2)
        assert points[-1].magnitude == pytest.approx(4.8)
        # Nothing reaches 4.9, so the grid stops at 4.8 with N = 1
        assert points[-1].cumulative_count == 1

    def test_float_representation_of_tenths(self):
        # 0.7 * 10 is 7.000000000000001; the grid must still start at 0.7
        points = cumulative_counts([0.7, 1.0])
        assert points[0].magnitude == pytest.approx(0.7)
        assert points[0].cumulative_count == 2

    def test_counts_non_increasing(self):
        mags = [4.0 + (i % 37) * 0.07 for i in range(200)]
        counts = [p.cumulative_count for p in cumulative_counts(mags)]
        assert counts == sorted(counts, reverse=True)
        assert counts[0] == 200

    def test_no_log_of_zero(self):
        for p in cumulative_counts([3.0, 8.0]):
            assert math.isfinite(p.log10_cumulative_count)
            assert p.cumulative_count >= 1

    def test_empty(self):
        assert cumulative_counts([]) == []

    def test_single_magnitude(self):
        points = cumulative_counts([6.0])
        assert len(points) == 1
        assert points[0].cumulative_count == 1

    def test_input_not_reordered(self):
        mags = [7.0, 5.0, 6.0]
        cumulative_counts(mags)
        assert mags == [7.0, 5.0, 6.0]


# ═══════════════════════════════════════════════════════════════════════════
# Section 2: Regression and correlation
# ═══════════════════════════════════════════════════════════════════════════

class TestLinearRegression:

    def test_exact_line(self):
        # log N = 8 - 1.0·M
        line = linear_regression(_points([(m, 8.0 - m) for m in (4.0, 5.0, 6.0, 7.0)]))
        assert line.slope == pytest.approx(-1.0)
        assert line.intercept == pytest.approx(8.0)
        assert line.b_value == pytest.approx(1.0)
        assert line.predict(5.5) == pytest.approx(2.5)

    def test_slope_reported_signed(self):
        line = linear_regression(_points([(1.0, 1.0), (2.0, 3.0)]))
        assert line.slope == pytest.approx(2.0)
        assert line.b_value == pytest.approx(-2.0)

    def test_fewer_than_two_points(self):
        assert linear_regression([]) is None
        assert linear_regression(_points([(5.0, 0.0)])) is None

    def test_identical_magnitudes(self):
        assert linear_regression(_points([(5.0, 1.0), (5.0, 0.5)])) is None

    def test_reference_sample_has_negative_slope(self):
        line = linear_regression(cumulative_counts([5.0, 5.0, 6.0, 7.0]))
        assert line.slope < 0
        assert line.b_value > 0


class TestCorrelation:

    def test_perfect_negative(self):
        pts = _points([(m, 8.0 - m) for m in (4.0, 5.0, 6.0)])
        assert correlation_coefficient(pts) == pytest.approx(-1.0)

    def test_perfect_positive(self):
        pts = _points([(1.0, 2.0), (2.0, 4.0), (3.0, 6.0)])
        assert correlation_coefficient(pts) == pytest.approx(1.0)

    def test_bounded(self):
        pts = _points([(4.0, 2.0), (4.5, 1.2), (5.0, 1.4), (5.5, 0.3), (6.0, 0.1)])
        r = correlation_coefficient(pts)
        assert -1.0 <= r <= 1.0

    def test_constant_y_is_zero(self):
        pts = _points([(4.0, 1.0), (5.0, 1.0), (6.0, 1.0)])
        assert correlation_coefficient(pts) == 0.0

    def test_fewer_than_two_points_is_zero(self):
        assert correlation_coefficient([]) == 0.0
        assert correlation_coefficient(_points([(5.0, 0.3)])) == 0.0

    @pytest.mark.parametrize("r,label", [
        (-0.95, "Strong"), (0.81, "Strong"), (-0.6, "Moderate"), (0.5, "Weak"), (0.0, "Weak"),
    ])
    def test_fit_strength(self, r, label):
        assert fit_strength(r) == label


# ═══════════════════════════════════════════════════════════════════════════
# Section 3: Bundle
# ═══════════════════════════════════════════════════════════════════════════

class TestAnalysis:

    def test_full_analysis(self):
        result = analyze_gutenberg_richter([5.0, 5.0, 6.0, 7.0])
        assert len(result.points) == 21
        assert result.regression is not None
        assert result.b_value == pytest.approx(-result.regression.slope)
        assert result.correlation < 0
        assert len(result.trend) == 2
        assert result.trend[0].magnitude == 5.0
        assert result.trend[1].magnitude == 7.0

    def test_empty_sample(self):
        result = analyze_gutenberg_richter([])
        assert result.points == ()
        assert result.regression is None
        assert result.b_value is None
        assert result.correlation == 0.0
        assert result.trend == ()

    def test_trend_line_without_fit(self):
        assert trend_line(_points([(5.0, 0.0)]), None) == []

    def test_to_dict(self):
        d = analyze_gutenberg_richter([5.0, 5.0, 6.0, 7.0]).to_dict()
        assert d["points"][0] == {
            "magnitude": 5.0,
            "log10_cumulative_count": pytest.approx(math.log10(4)),
            "cumulative_count": 4,
        }
        assert d["b_value"] == pytest.approx(d["regression"]["b_value"])
        assert d["fit_strength"] in {"Strong", "Moderate", "Weak"}

    def test_to_dict_empty(self):
        d = analyze_gutenberg_richter([]).to_dict()
        assert d["regression"] is None
        assert d["b_value"] is None
        assert d["trend_line"] == []
