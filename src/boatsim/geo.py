"""
Geographic Primitives
=====================

Positions, bearing/magnitude vectors and spherical-earth helpers.

Conventions:
    - Bearings are compass degrees, 0 = north, increasing clockwise.
    - Distances are metres, speeds metres/second.
"""

import math
from dataclasses import dataclass


# Mean earth radius in metres
EARTH_RADIUS_M = 6371000.0


def normalize_angle(angle: float) -> float:
    """Normalize an angle to [0, 360)."""
    angle = angle % 360.0
    if angle >= 360.0:
        # -1e-15 % 360 rounds to 360.0
        angle = 0.0
    return angle


def normalize_lon(lon: float) -> float:
    """Normalize a longitude to [-180, 180)."""
    return ((lon + 180.0) % 360.0) - 180.0


def compass_diff(a: float, b: float) -> float:
    """
    Shortest signed angular difference from bearing a to bearing b.

    Args:
        a: Starting bearing (degrees)
        b: Target bearing (degrees)

    Returns:
        b - a wrapped to (-180, 180]. Positive means b is clockwise of a.
    """
    diff = (b - a) % 360.0
    if diff > 180.0:
        diff -= 360.0
    return diff


@dataclass
class GeoPos:
    """Geographic position in decimal degrees."""
    lat: float
    lon: float

    def copy(self) -> 'GeoPos':
        return GeoPos(self.lat, self.lon)


@dataclass
class GeoVec:
    """A bearing/magnitude vector (velocity, displacement, current, wind)."""
    angle: float = 0.0    # Compass bearing (degrees)
    mag: float = 0.0      # Magnitude (m or m/s)

    @classmethod
    def from_components(cls, east: float, north: float) -> 'GeoVec':
        """Build a vector from east/north components."""
        mag = math.hypot(east, north)
        if mag == 0.0:
            return cls(0.0, 0.0)
        return cls(normalize_angle(math.degrees(math.atan2(east, north))), mag)

    @property
    def east(self) -> float:
        return self.mag * math.sin(math.radians(self.angle))

    @property
    def north(self) -> float:
        return self.mag * math.cos(math.radians(self.angle))

    def scaled(self, factor: float) -> 'GeoVec':
        """Return a copy with the magnitude multiplied by factor."""
        return GeoVec(self.angle, self.mag * factor)

    def add(self, other: 'GeoVec') -> 'GeoVec':
        """Vector sum (flat east/north components)."""
        return GeoVec.from_components(self.east + other.east, self.north + other.north)


def advance(pos: GeoPos, vec: GeoVec):
    """
    Move a position along a great circle, in place.

    Args:
        pos: Position to mutate
        vec: Bearing (degrees) and distance (metres). A negative
             distance moves backwards along the bearing.
    """
    if vec.mag == 0.0:
        return

    lat1 = math.radians(pos.lat)
    lon1 = math.radians(pos.lon)
    brg = math.radians(vec.angle)
    d = vec.mag / EARTH_RADIUS_M

    sin_lat2 = (math.sin(lat1) * math.cos(d) +
                math.cos(lat1) * math.sin(d) * math.cos(brg))
    lat2 = math.asin(max(-1.0, min(1.0, sin_lat2)))
    lon2 = lon1 + math.atan2(
        math.sin(brg) * math.sin(d) * math.cos(lat1),
        math.cos(d) - math.sin(lat1) * sin_lat2
    )

    pos.lat = math.degrees(lat2)
    pos.lon = normalize_lon(math.degrees(lon2))


def distance(a: GeoPos, b: GeoPos) -> float:
    """
    Great circle distance in metres.

    Uses Haversine formula.
    """
    lat1_rad = math.radians(a.lat)
    lat2_rad = math.radians(b.lat)
    dlat_rad = math.radians(b.lat - a.lat)
    dlon_rad = math.radians(b.lon - a.lon)

    h = (math.sin(dlat_rad / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) *
         math.sin(dlon_rad / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))

    return EARTH_RADIUS_M * c
