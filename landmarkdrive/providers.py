"""Route and landmark sources consumed by the traversal engine.

The engine only needs two capabilities: an ordered route between two places
and the landmarks of a region. The classes here serve both from local data:
saved directions-service responses, geocoding-style feature collections, CSV
files, or fixed in-memory values.
"""
from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Protocol, Sequence

from .animator import Route, validate_route
from .config import Landmark, check_unique_names, load_mapping, parse_route
from .errors import GeocodeFailed, InvalidRouteError, NoRouteFound
from .geometry import Coordinate, as_coordinate

log = logging.getLogger("landmarkdrive.providers")


@dataclass(frozen=True)
class BoundingBox:
    lon_min: float
    lat_min: float
    lon_max: float
    lat_max: float

    def __post_init__(self) -> None:
        if self.lon_min > self.lon_max or self.lat_min > self.lat_max:
            raise ValueError(f"Bounding box minimums exceed maximums: {self}")

    @staticmethod
    def from_sequence(values: Sequence[float]) -> "BoundingBox":
        lon_min, lat_min, lon_max, lat_max = (float(value) for value in values)
        return BoundingBox(lon_min, lat_min, lon_max, lat_max)

    def contains(self, point: Coordinate) -> bool:
        lon, lat = point
        return self.lon_min <= lon <= self.lon_max and self.lat_min <= lat <= self.lat_max


class RouteProvider(Protocol):
    def get_route(self, origin: Any, destination: Any) -> Route:
        ...


class LandmarkProvider(Protocol):
    def get_landmarks(self, region: Optional[BoundingBox] = None) -> List[Landmark]:
        ...


# ----------------------------------------------------------------------
# Routes
# ----------------------------------------------------------------------


def parse_directions(payload: Any) -> Route:
    """Extract the first route geometry from a directions-service response.

    Expects ``{"routes": [{"geometry": {"coordinates": [[lon, lat], ...]}}]}``.
    """

    if not isinstance(payload, dict):
        raise NoRouteFound("Directions response is not a JSON object.")
    routes = payload.get("routes") or []
    if not routes:
        message = payload.get("message") or "No routes found. Please try different locations."
        raise NoRouteFound(message)
    try:
        return validate_route(parse_route(routes[0]["geometry"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise NoRouteFound(f"Directions response has no usable geometry: {exc}") from exc


class DirectionsFileProvider:
    """Serve the route stored in a saved directions response (JSON or YAML)."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def get_route(self, origin: Any = None, destination: Any = None) -> Route:
        log.info("Loading route %s -> %s from %s", origin, destination, self.path)
        try:
            payload = load_mapping(self.path)
        except FileNotFoundError as exc:
            raise NoRouteFound(f"Directions file not found: {self.path}") from exc
        return parse_directions(payload)


class StaticRouteProvider:
    """Always answer with the same route."""

    def __init__(self, route: Sequence[Coordinate]) -> None:
        try:
            self._route = validate_route(route)
        except InvalidRouteError as exc:
            raise NoRouteFound(str(exc)) from exc

    def get_route(self, origin: Any = None, destination: Any = None) -> Route:
        return self._route


# ----------------------------------------------------------------------
# Landmarks
# ----------------------------------------------------------------------


def filter_landmarks(landmarks: Sequence[Landmark], region: Optional[BoundingBox]) -> List[Landmark]:
    """Return the landmarks that fall within ``region`` (all of them when it is ``None``)."""

    if region is None:
        return list(landmarks)
    return [landmark for landmark in landmarks if region.contains(landmark.coordinates)]


def parse_place_features(payload: Any) -> List[Landmark]:
    """Build landmarks from a geocoding-style feature collection.

    Each feature contributes ``feature["text"]`` (or ``properties.name``) as the
    name and ``feature["geometry"]["coordinates"]`` as its position.
    """

    if not isinstance(payload, dict) or "features" not in payload:
        raise GeocodeFailed("Landmark response has no 'features' collection.")
    landmarks: List[Landmark] = []
    for feature in payload["features"] or []:
        try:
            name = feature.get("text") or (feature.get("properties") or {})["name"]
            coordinates = as_coordinate(feature["geometry"]["coordinates"])
        except (KeyError, TypeError, ValueError) as exc:
            raise GeocodeFailed(f"Malformed landmark feature: {feature!r}") from exc
        landmarks.append(Landmark(name=str(name), coordinates=coordinates))
    return landmarks


def _load_csv(path: Path) -> List[Landmark]:
    landmarks: List[Landmark] = []
    with path.open("r", encoding="utf8", newline="") as handle:
        reader = csv.DictReader(handle)
        for row in reader:
            try:
                landmarks.append(Landmark.from_mapping(row))
            except ValueError as exc:
                raise GeocodeFailed(f"{path}:{reader.line_num}: {exc}") from exc
    return landmarks


def load_landmarks(path: Path) -> List[Landmark]:
    """Read landmarks from CSV (``name,longitude,latitude``), JSON/YAML lists or GeoJSON."""

    path = Path(path)
    if not path.exists():
        raise GeocodeFailed(f"Landmark file not found: {path}")
    if path.suffix.lower() == ".csv":
        landmarks = _load_csv(path)
    else:
        payload = load_mapping(path)
        if isinstance(payload, dict):
            landmarks = parse_place_features(payload)
        elif isinstance(payload, list):
            try:
                landmarks = [Landmark.from_mapping(item) for item in payload]
            except (AttributeError, TypeError, ValueError) as exc:
                raise GeocodeFailed(f"{path}: {exc}") from exc
        else:
            raise GeocodeFailed(f"{path}: expected a list of landmarks or a feature collection")
    try:
        check_unique_names(landmarks)
    except ValueError as exc:
        raise GeocodeFailed(f"{path}: {exc}") from exc
    log.info("Loaded %d landmarks from %s", len(landmarks), path)
    return landmarks


class StaticLandmarkProvider:
    """Serve a fixed landmark set, optionally narrowed to a region."""

    def __init__(self, landmarks: Sequence[Landmark]) -> None:
        try:
            check_unique_names(landmarks)
        except ValueError as exc:
            raise GeocodeFailed(str(exc)) from exc
        self._landmarks = tuple(landmarks)

    @classmethod
    def from_file(cls, path: Path) -> "StaticLandmarkProvider":
        return cls(load_landmarks(path))

    def get_landmarks(self, region: Optional[BoundingBox] = None) -> List[Landmark]:
        return filter_landmarks(self._landmarks, region)
