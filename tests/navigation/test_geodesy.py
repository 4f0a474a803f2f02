"""Tests for geodesy helpers."""

import pytest

from airroute.navigation.geodesy import (
    COORDINATE_PATTERN,
    CoordinateFormatError,
    Coordinates,
    great_circle_distance_nm,
    parse_coordinate,
)


class TestGreatCircleDistance:
    """Test great_circle_distance_nm function."""

    def test_zero_distance(self):
        """Test distance from a point to itself."""
        point = Coordinates(42.97, -83.74)
        assert great_circle_distance_nm(point, point) == 0.0

    def test_one_degree_of_latitude(self):
        """Test one degree along a meridian is about 60 nm."""
        distance = great_circle_distance_nm(Coordinates(0, 0), Coordinates(1, 0))
        assert distance == pytest.approx(60.04, abs=0.01)

    def test_symmetric(self):
        """Test distance does not depend on direction."""
        a = Coordinates(42.7483, -73.8017)
        b = Coordinates(41.9786, -87.9048)
        assert great_circle_distance_nm(a, b) == pytest.approx(great_circle_distance_nm(b, a))

    def test_known_city_pair(self):
        """Test Albany to Chicago O'Hare."""
        distance = great_circle_distance_nm(
            Coordinates(42.7483, -73.8017), Coordinates(41.9786, -87.9048)
        )
        assert distance == pytest.approx(627, abs=3)

    def test_antipodal(self):
        """Test half the circumference does not overflow asin."""
        distance = great_circle_distance_nm(Coordinates(0, 0), Coordinates(0, 180))
        assert distance == pytest.approx(10807.0, abs=1.0)


class TestParseCoordinate:
    """Test parse_coordinate function."""

    def test_degrees_minutes(self):
        """Test DDMMN/DDDMMW form."""
        point = parse_coordinate("4814N/06848W")

        assert point.lat == pytest.approx(48.2333, abs=1e-3)
        assert point.lon == pytest.approx(-68.8, abs=1e-3)

    def test_default_hemispheres(self):
        """Test omitted hemispheres default to north and west."""
        assert parse_coordinate("4814/06848") == parse_coordinate("4814N/06848W")

    def test_configured_default_hemispheres(self):
        """Test defaults can be changed."""
        point = parse_coordinate("4814/06848", "S", "E")

        assert point.lat < 0
        assert point.lon > 0

    def test_explicit_south_east(self):
        """Test southern and eastern hemispheres."""
        point = parse_coordinate("3352S/15112E")

        assert point.lat == pytest.approx(-33.8667, abs=1e-3)
        assert point.lon == pytest.approx(151.2, abs=1e-3)

    def test_with_seconds(self):
        """Test DDMMSS/DDDMMSS form."""
        point = parse_coordinate("481430N/0684815W")

        assert point.lat == pytest.approx(48 + 14 / 60 + 30 / 3600, abs=1e-6)
        assert point.lon == pytest.approx(-(68 + 48 / 60 + 15 / 3600), abs=1e-6)

    def test_lowercase_and_whitespace(self):
        """Test input is normalized before matching."""
        assert parse_coordinate(" 4814n/06848w ") == parse_coordinate("4814N/06848W")

    @pytest.mark.parametrize(
        "text",
        [
            "48140N/06848W",  # five latitude digits
            "4814N/068480W",  # six longitude digits
            "4861N/06848W",  # minutes out of range
            "9130N/06848W",  # latitude past the pole
            "4814N/18100W",  # longitude past the antimeridian
            "KALB",
            "4814N-06848W",
            "",
        ],
    )
    def test_invalid(self, text):
        """Test malformed tokens raise CoordinateFormatError."""
        with pytest.raises(CoordinateFormatError):
            parse_coordinate(text)

    def test_error_is_value_error(self):
        """Test callers can catch ValueError."""
        with pytest.raises(ValueError):
            parse_coordinate("nonsense")

    def test_pattern_matches_route_shapes(self):
        """Test the shared pattern recognises both forms."""
        assert COORDINATE_PATTERN.match("4814N/06848W")
        assert COORDINATE_PATTERN.match("4814/06848")
        assert not COORDINATE_PATTERN.match("KALB")
