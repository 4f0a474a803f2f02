"""Geographic primitives used by the route engine.

Spherical-earth accuracy is enough here: distances only rank procedure
transitions against each other, they never feed leg or fuel computations.

Typical usage:
    from airroute.navigation.geodesy import great_circle_distance_nm, parse_coordinate

    point = parse_coordinate("4814N/06848W")
    distance = great_circle_distance_nm(point, other)
"""

import math
import re
from dataclasses import dataclass

EARTH_RADIUS_NM = 3440.065

COORDINATE_PATTERN = re.compile(r"^(\d{4,6})([NS])?/(\d{5,7})([EW])?$")


class CoordinateFormatError(ValueError):
    """Raised when a route coordinate token cannot be decoded."""


@dataclass(frozen=True)
class Coordinates:
    """Latitude/longitude pair in decimal degrees.

    Attributes:
        lat: Latitude, positive north
        lon: Longitude, positive east
    """

    lat: float
    lon: float

    def __str__(self) -> str:
        return f"{self.lat:.4f},{self.lon:.4f}"


def great_circle_distance_nm(a: Coordinates, b: Coordinates) -> float:
    """Calculate great circle distance between two points.

    Uses the Haversine formula.

    Args:
        a: First point
        b: Second point

    Returns:
        Distance in nautical miles

    Examples:
        >>> great_circle_distance_nm(Coordinates(0, 0), Coordinates(0, 1))
        60.04...
    """
    lat1, lon1 = math.radians(a.lat), math.radians(a.lon)
    lat2, lon2 = math.radians(b.lat), math.radians(b.lon)

    dlat = lat2 - lat1
    dlon = lon2 - lon1
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.asin(min(1.0, math.sqrt(h)))

    return c * EARTH_RADIUS_NM


def _split_angle(digits: str, degree_width: int) -> float:
    degrees = int(digits[:degree_width])
    minutes = int(digits[degree_width : degree_width + 2])
    seconds = int(digits[degree_width + 2 :] or 0)
    if minutes >= 60 or seconds >= 60:
        raise CoordinateFormatError(f"Minutes/seconds out of range in {digits}")
    return degrees + minutes / 60 + seconds / 3600


def parse_coordinate(
    text: str,
    default_lat_hemisphere: str = "N",
    default_lon_hemisphere: str = "W",
) -> Coordinates:
    """Decode a route coordinate token.

    Latitude is ``DDMM`` or ``DDMMSS``, longitude ``DDDMM`` or ``DDDMMSS``,
    each optionally followed by a hemisphere letter. A missing letter falls
    back to the given defaults (north/west unless configured otherwise).

    Args:
        text: Coordinate token, e.g. "4814N/06848W" or "4814/06848"
        default_lat_hemisphere: "N" or "S"
        default_lon_hemisphere: "E" or "W"

    Returns:
        Decoded coordinates

    Raises:
        CoordinateFormatError: If the token does not match the pattern, has an
            unsupported digit count, or is out of range.

    Examples:
        >>> parse_coordinate("4814N/06848W")
        Coordinates(lat=48.233..., lon=-68.8)
    """
    match = COORDINATE_PATTERN.match(text.strip().upper())
    if not match:
        raise CoordinateFormatError(f"Invalid coordinate format: {text}")

    lat_digits, lat_hemi, lon_digits, lon_hemi = match.groups()

    if len(lat_digits) not in (4, 6):
        raise CoordinateFormatError(f"Latitude must be DDMM or DDMMSS: {text}")
    if len(lon_digits) not in (5, 7):
        raise CoordinateFormatError(f"Longitude must be DDDMM or DDDMMSS: {text}")

    lat = _split_angle(lat_digits, 2)
    lon = _split_angle(lon_digits, 3)

    if lat > 90 or lon > 180:
        raise CoordinateFormatError(f"Coordinate out of range: {text}")

    if (lat_hemi or default_lat_hemisphere) == "S":
        lat = -lat
    if (lon_hemi or default_lon_hemisphere) == "W":
        lon = -lon

    return Coordinates(lat=lat, lon=lon)
