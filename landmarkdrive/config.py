"""Configuration loading utilities for the landmark drive simulator."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
import json

from .geometry import Coordinate, as_coordinate


@dataclass(frozen=True)
class Landmark:
    """A named point of interest the vehicle can cross."""

    name: str
    coordinates: Coordinate

    @staticmethod
    def from_mapping(data: Dict[str, Any]) -> "Landmark":
        try:
            name = str(data["name"])
            if "coordinates" in data:
                coordinates = as_coordinate(data["coordinates"])
            else:
                longitude = data["lon"] if "lon" in data else data["longitude"]
                latitude = data["lat"] if "lat" in data else data["latitude"]
                coordinates = as_coordinate((longitude, latitude))
        except KeyError as exc:
            raise ValueError(f"Landmark configuration missing field: {exc.args[0]}") from exc
        return Landmark(name=name, coordinates=coordinates)


@dataclass
class VehicleConfig:
    """Configuration for how the vehicle marker should be rendered."""

    type: str = "car"
    icon_path: Optional[Path] = None
    icon_scale: float = 1.0

    @staticmethod
    def from_mapping(data: Optional[Dict[str, Any]], base_dir: Optional[Path] = None) -> "VehicleConfig":
        if not data:
            return VehicleConfig()
        icon_path = data.get("icon") or data.get("icon_path")
        if icon_path and base_dir is not None and not Path(icon_path).is_absolute():
            icon_path = Path(base_dir) / icon_path
        return VehicleConfig(
            type=data.get("type", "car"),
            icon_path=Path(icon_path) if icon_path else None,
            icon_scale=float(data.get("icon_scale", 1.0)),
        )


def parse_route(data: Any) -> Tuple[Coordinate, ...]:
    """Accept a list of ``[lon, lat]`` pairs, a GeoJSON LineString or a GeoJSON Feature."""

    if isinstance(data, dict):
        if data.get("type") == "Feature" or "geometry" in data:
            data = data.get("geometry") or {}
        if data.get("type", "LineString") != "LineString":
            raise ValueError(f"Route geometry must be a LineString, got {data.get('type')!r}")
        data = data.get("coordinates")
    if not isinstance(data, Iterable) or isinstance(data, (str, bytes)):
        raise ValueError("Route must be provided as a list of [lon, lat] pairs.")
    return tuple(as_coordinate(point) for point in data)


def parse_landmarks(data: Any) -> List[Landmark]:
    if not isinstance(data, Iterable) or isinstance(data, (str, bytes)):
        raise ValueError("Landmarks must be provided as a list of mappings.")
    landmarks = [Landmark.from_mapping(item) for item in data]
    check_unique_names(landmarks)
    return landmarks


def check_unique_names(landmarks: Sequence[Landmark]) -> None:
    seen = set()
    for landmark in landmarks:
        if landmark.name in seen:
            raise ValueError(f"Duplicate landmark name: {landmark.name!r}")
        seen.add(landmark.name)


@dataclass
class TraversalConfig:
    """Top-level configuration for a simulated drive."""

    title: str = ""
    origin: Optional[str] = None
    destination: Optional[str] = None
    route: Tuple[Coordinate, ...] = ()
    directions_file: Optional[Path] = None
    landmarks: List[Landmark] = field(default_factory=list)
    landmarks_file: Optional[Path] = None
    region: Optional[Tuple[float, float, float, float]] = None
    proximity_threshold: float = 0.05
    notification_ttl_ms: int = 5000
    completion_ttl_ms: int = 5000
    frame_rate: int = 30
    output_path: Path = Path("landmarkdrive.mp4")
    width: int = 1280
    height: int = 720
    margin_degrees: float = 0.1
    vehicle: VehicleConfig = field(default_factory=VehicleConfig)
    pause_at_end: float = 2.0
    summary_display_seconds: float = 2.0

    @staticmethod
    def from_mapping(data: Dict[str, Any], base_dir: Optional[Path] = None) -> "TraversalConfig":
        base_dir = Path(base_dir) if base_dir else Path(".")

        def resolve(value: Optional[str]) -> Optional[Path]:
            if not value:
                return None
            path = Path(value)
            return path if path.is_absolute() else base_dir / path

        route = parse_route(data["route"]) if data.get("route") is not None else ()
        directions_file = resolve(data.get("directions_file") or data.get("directions"))
        if not route and directions_file is None:
            raise ValueError("Either 'route' or 'directions_file' must be configured.")

        region = data.get("region") or data.get("bbox")
        if region is not None:
            if isinstance(region, (str, bytes)) or len(region) != 4:
                raise ValueError("Region must be [lon_min, lat_min, lon_max, lat_max].")
            region = tuple(float(value) for value in region)

        output_path = data.get("output") or data.get("output_path") or "landmarkdrive.mp4"

        return TraversalConfig(
            title=data.get("title", ""),
            origin=data.get("origin"),
            destination=data.get("destination"),
            route=route,
            directions_file=directions_file,
            landmarks=parse_landmarks(data.get("landmarks") or []),
            landmarks_file=resolve(data.get("landmarks_file")),
            region=region,
            proximity_threshold=float(data.get("proximity_threshold", 0.05)),
            notification_ttl_ms=int(data.get("notification_ttl_ms", 5000)),
            completion_ttl_ms=int(data.get("completion_ttl_ms", 5000)),
            frame_rate=int(data.get("frame_rate", data.get("fps", 30))),
            output_path=Path(output_path),
            width=int(data.get("width", 1280)),
            height=int(data.get("height", 720)),
            margin_degrees=float(data.get("margin_degrees", data.get("margin", 0.1))),
            vehicle=VehicleConfig.from_mapping(data.get("vehicle"), base_dir=base_dir),
            pause_at_end=float(data.get("pause_at_end", 2.0)),
            summary_display_seconds=float(data.get("summary_display_seconds", 2.0)),
        )


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:  # pragma: no cover - optional dependency
        import yaml  # type: ignore
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError(
            "YAML configuration requested but PyYAML is not available. Install with 'pip install pyyaml'."
        ) from exc
    with path.open("r", encoding="utf8") as handle:
        return yaml.safe_load(handle)  # type: ignore[no-any-return]


def load_mapping(path: Path) -> Any:
    """Read a JSON or YAML document, chosen by file suffix."""

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    if path.suffix.lower() in {".yaml", ".yml"}:
        return _load_yaml(path)
    with path.open("r", encoding="utf8") as handle:
        return json.load(handle)


def load_config(path: Path) -> TraversalConfig:
    """Load a :class:`TraversalConfig` from a JSON or YAML file."""

    path = Path(path)
    raw = load_mapping(path)
    if not isinstance(raw, dict):
        raise ValueError("Configuration file must contain a mapping at the top level.")

    return TraversalConfig.from_mapping(raw, base_dir=path.parent)
