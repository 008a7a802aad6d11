"""Coordinate helpers used by the traversal engine and the renderer.

Coordinates are ``(longitude, latitude)`` pairs in degrees, the order used by
directions and geocoding services.
"""
from __future__ import annotations

import math
from typing import Iterable, List, Sequence, Tuple

Coordinate = Tuple[float, float]


EARTH_RADIUS_KM = 6371.0088


def planar_distance(a: Coordinate, b: Coordinate) -> float:
    """Euclidean distance treating longitude/latitude as a flat plane (degree units)."""

    return math.hypot(a[0] - b[0], a[1] - b[1])


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """Compute the great-circle distance between two lon/lat points in kilometres."""

    lon1, lat1 = map(math.radians, a)
    lon2, lat2 = map(math.radians, b)
    sin_lat = math.sin((lat2 - lat1) / 2.0)
    sin_lon = math.sin((lon2 - lon1) / 2.0)
    h = sin_lat**2 + math.cos(lat1) * math.cos(lat2) * sin_lon**2
    central_angle = 2.0 * math.asin(min(1.0, math.sqrt(h)))
    return EARTH_RADIUS_KM * central_angle


def bearing_degrees(a: Coordinate, b: Coordinate) -> float:
    """Return the initial bearing from coordinate ``a`` to coordinate ``b`` in degrees."""

    lon1, lat1 = map(math.radians, a)
    lon2, lat2 = map(math.radians, b)
    delta_lon = lon2 - lon1
    x = math.sin(delta_lon) * math.cos(lat2)
    y = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(delta_lon)
    bearing = math.degrees(math.atan2(x, y))
    return (bearing + 360.0) % 360.0


def cumulative_distances(points: Sequence[Coordinate]) -> List[float]:
    """Return cumulative travel distance along a sequence of coordinates."""

    distances: List[float] = [0.0]
    for start, end in zip(points[:-1], points[1:]):
        distances.append(distances[-1] + haversine_km(start, end))
    return distances


def bounds(points: Iterable[Coordinate], margin: float = 0.0) -> Tuple[float, float, float, float]:
    """Return ``(lon_min, lat_min, lon_max, lat_max)`` around ``points`` padded by ``margin``."""

    points = list(points)
    if not points:
        raise ValueError("Cannot compute bounds of an empty set of coordinates.")
    lons = [lon for lon, _ in points]
    lats = [lat for _, lat in points]
    return min(lons) - margin, min(lats) - margin, max(lons) + margin, max(lats) + margin


def as_coordinate(value: object) -> Coordinate:
    """Coerce ``[lon, lat]`` or ``[lon, lat, altitude]`` into a ``(lon, lat)`` float tuple."""

    if isinstance(value, (str, bytes)):
        raise ValueError(f"Expected a [lon, lat] pair, got {value!r}")
    try:
        parts = list(value)  # type: ignore[call-overload]
        if len(parts) not in (2, 3):
            raise ValueError(f"Expected a [lon, lat] pair, got {value!r}")
        coordinate = (float(parts[0]), float(parts[1]))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Expected a [lon, lat] pair, got {value!r}") from exc
    if not all(math.isfinite(part) for part in coordinate):
        raise ValueError(f"Coordinate components must be finite, got {value!r}")
    return coordinate
