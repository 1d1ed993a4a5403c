"""
test_catalogue_parser.py — Tests for catalogue CSV parsing and the
GeoJSON feed adapter.

Covers:
    • Column mapping (date, lat, lon, depth, mw, eventid)
    • Header / comment / blank line skipping
    • Malformed rows (short, non-numeric, non-finite, bad date)
    • Depth defaults and clamping
    • Feed feature normalisation and the tagged source union

Run with:
    pytest tests/test_catalogue_parser.py -v
"""

from __future__ import annotations

import pytest

from backend.app.seismicity.catalogue_parser import is_header, parse_catalogue, parse_row
from backend.app.seismicity.feed_adapter import events_from_feed, parse_feed_feature
from backend.app.seismicity.models import SourceKind, to_epoch_ms, parse_iso_datetime
from backend.app.seismicity.sources import RawSource, normalize


# ═══════════════════════════════════════════════════════════════════════════
# Test Fixtures
# ═══════════════════════════════════════════════════════════════════════════

HEADER = "date,lat,lon,smajax,sminax,strike,q,depth,unc,q,mw,unc,q,eventid"


def _row(
    date: str = "2011-03-11 05:46:23.00",
    lat: str = "38.297",
    lon: str = "142.373",
    depth: str = "29.0",
    mag: str = "9.08",
    eventid: str = "16461282",
) -> str:
    """Build one 14-column catalogue line."""
    return ",".join([
        date, lat, lon, "3.7", "2.9", "25", "A", depth, "1.0", "A", mag, "0.10", "A", eventid,
    ])


def _feature(
    mag=5.2,
    lon=139.69,
    lat=35.68,
    depth=10.0,
    time=1_300_000_000_000,
    place="near Tokyo, Japan",
    fid="us7000abcd",
    tsunami=0,
):
    coords = [lon, lat] if depth is None else [lon, lat, depth]
    return {
        "type": "Feature",
        "properties": {"mag": mag, "place": place, "time": time, "tsunami": tsunami},
        "geometry": {"type": "Point", "coordinates": coords},
        "id": fid,
    }


# ═══════════════════════════════════════════════════════════════════════════
# Section 1: Catalogue CSV
# ═══════════════════════════════════════════════════════════════════════════

class TestParseRow:
    """Single-row column mapping."""

    def test_column_mapping(self):
        text = _row()
        events = parse_catalogue(text)
        assert len(events) == 1
        e = events[0]
        assert e.latitude == pytest.approx(38.297)
        assert e.longitude == pytest.approx(142.373)
        assert e.depth_km == pytest.approx(29.0)
        assert e.magnitude == pytest.approx(9.08)
        assert e.event_id == "16461282"
        assert e.source is SourceKind.CATALOGUE

    def test_timestamp_is_utc_epoch_ms(self):
        e = parse_catalogue(_row(date="1970-01-02 00:00:00.00"))[0]
        assert e.timestamp_ms == 86_400_000

    def test_fractional_seconds_kept(self):
        e = parse_catalogue(_row(date="2000-01-01 00:00:00.25"))[0]
        assert e.timestamp_ms % 1000 == 250

    def test_place_is_coordinate_label(self):
        e = parse_catalogue(_row(lat="-36.122", lon="-72.898"))[0]
        assert e.place == "-36.12°, -72.90°"

    def test_missing_eventid_falls_back_to_ordinal(self):
        events = parse_catalogue("\n".join([_row(eventid="A1"), _row(eventid="")]))
        assert [e.event_id for e in events] == ["A1", "1"]

    def test_extra_columns_tolerated(self):
        line = _row(eventid="x") + ",extra,more,999"
        e = parse_catalogue(line)[0]
        # eventid is always the last column
        assert e.event_id == "999"

    def test_whitespace_around_fields(self):
        line = " , ".join(_row().split(","))
        e = parse_catalogue(line)[0]
        assert e.magnitude == pytest.approx(9.08)


class TestDepth:
    """Depth defaults and clamping."""

    def test_missing_depth_is_zero(self):
        assert parse_catalogue(_row(depth=""))[0].depth_km == 0.0

    def test_non_numeric_depth_is_zero(self):
        assert parse_catalogue(_row(depth="n/a"))[0].depth_km == 0.0

    def test_negative_depth_clamped(self):
        assert parse_catalogue(_row(depth="-1.5"))[0].depth_km == 0.0


class TestSkipping:
    """Lines that are not events never raise and never produce events."""

    def test_empty_input(self):
        assert parse_catalogue("") == []

    def test_header_comment_and_blank_lines(self):
        text = "\n".join(["# ISC-GEM extract", HEADER, "", "   ", _row()])
        assert len(parse_catalogue(text)) == 1

    def test_short_row_skipped(self):
        assert parse_catalogue("2011-03-11,38.3,142.4,29.0,9.1") == []

    @pytest.mark.parametrize("field", ["lat", "lon", "mag"])
    @pytest.mark.parametrize("bad", ["", "abc", "nan", "inf"])
    def test_non_finite_required_field_skipped(self, field, bad):
        assert parse_catalogue(_row(**{field: bad})) == []

    def test_unparseable_date_skipped(self):
        assert parse_catalogue(_row(date="sometime in March")) == []

    def test_impossible_date_skipped(self):
        assert parse_catalogue(_row(date="2011-02-30 00:00:00")) == []

    def test_good_rows_survive_bad_neighbours(self):
        text = "\n".join([_row(eventid="1"), _row(mag="x"), "garbage", _row(eventid="3")])
        assert [e.event_id for e in parse_catalogue(text)] == ["1", "3"]

    def test_windows_line_endings(self):
        text = "\r\n".join([HEADER, _row(eventid="1"), _row(eventid="2")])
        assert len(parse_catalogue(text)) == 2

    def test_file_order_preserved(self):
        text = "\n".join(_row(eventid=str(i), date=f"20{10 - i:02d}-01-01") for i in range(5))
        assert [e.event_id for e in parse_catalogue(text)] == ["0", "1", "2", "3", "4"]


class TestHeaderDetection:

    def test_isc_gem_header(self):
        assert is_header(HEADER.split(","))

    def test_data_row_is_not_header(self):
        assert not is_header(_row().split(","))

    def test_parse_row_rejects_short_fields(self):
        assert parse_row(["2011-01-01", "1", "2"], ordinal=0) is None


class TestDateParsing:

    @pytest.mark.parametrize("text,expected_ms", [
        ("1970-01-01", 0),
        ("1970-01-01T00:00:01Z", 1000),
        ("1970-01-01 00:00:01.5", 1500),
        ("1970-01-01T01:00:00+01:00", 0),
        ("1970-01-01T00:00:00-0030", 1_800_000),
    ])
    def test_iso_variants(self, text, expected_ms):
        assert to_epoch_ms(parse_iso_datetime(text)) == expected_ms

    def test_garbage_is_none(self):
        assert parse_iso_datetime("yesterday") is None


# ═══════════════════════════════════════════════════════════════════════════
# Section 2: GeoJSON feed
# ═══════════════════════════════════════════════════════════════════════════

class TestFeedAdapter:

    def test_field_mapping(self):
        e = parse_feed_feature(_feature())
        assert e.magnitude == 5.2
        assert e.longitude == 139.69
        assert e.latitude == 35.68
        assert e.depth_km == 10.0
        assert e.timestamp_ms == 1_300_000_000_000
        assert e.place == "near Tokyo, Japan"
        assert e.event_id == "us7000abcd"
        assert e.tsunami is False
        assert e.source is SourceKind.FEED

    def test_missing_depth_defaults_to_zero(self):
        assert parse_feed_feature(_feature(depth=None)).depth_km == 0.0

    def test_negative_depth_clamped(self):
        assert parse_feed_feature(_feature(depth=-0.8)).depth_km == 0.0

    def test_missing_place_uses_coordinates(self):
        assert parse_feed_feature(_feature(place=None)).place == "35.68°, 139.69°"

    def test_tsunami_flag(self):
        assert parse_feed_feature(_feature(tsunami=1)).tsunami is True

    @pytest.mark.parametrize("override", [
        {"mag": None}, {"mag": "strong"}, {"lat": float("nan")}, {"time": None},
    ])
    def test_unusable_features_skipped(self, override):
        assert parse_feed_feature(_feature(**override)) is None

    def test_collection_and_bare_list(self):
        features = [_feature(fid="a"), _feature(mag=None), _feature(fid="b")]
        from_collection = events_from_feed({"type": "FeatureCollection", "features": features})
        from_list = events_from_feed(features)
        assert [e.event_id for e in from_collection] == ["a", "b"]
        assert from_collection == from_list

    def test_empty_collection(self):
        assert events_from_feed({"type": "FeatureCollection", "features": []}) == []


class TestSourceUnion:

    def test_catalogue_dispatch(self):
        events = normalize(RawSource.catalogue(_row()))
        assert len(events) == 1
        assert events[0].source is SourceKind.CATALOGUE

    def test_feed_dispatch(self):
        events = normalize(RawSource.feed({"features": [_feature()]}))
        assert len(events) == 1
        assert events[0].source is SourceKind.FEED

    def test_both_shapes_yield_same_event_type(self):
        a = normalize(RawSource.catalogue(_row()))[0]
        b = normalize(RawSource.feed([_feature()]))[0]
        assert type(a) is type(b)

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError):
            normalize(RawSource("shapefile", b""))
