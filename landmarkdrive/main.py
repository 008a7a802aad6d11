"""Command line entry point for the landmark drive simulator."""
from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import List, Optional

from .config import TraversalConfig, load_config
from .controller import simulate
from .errors import GeocodeFailed, NoRouteFound
from .providers import (
    BoundingBox,
    DirectionsFileProvider,
    LandmarkProvider,
    RouteProvider,
    StaticLandmarkProvider,
    StaticRouteProvider,
    load_landmarks,
)

log = logging.getLogger("landmarkdrive.cli")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Drive a vehicle along a route and report the landmarks it crosses.")
    parser.add_argument(
        "config",
        type=Path,
        help="Path to the JSON or YAML configuration file containing the route and landmarks.",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run the traversal without rendering and print the notifications instead.",
    )
    parser.add_argument("--output", type=Path, default=None, help="Override the video output path.")
    parser.add_argument(
        "--log-level",
        default=os.getenv("LANDMARKDRIVE_LOG_LEVEL", "INFO").upper(),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: $LANDMARKDRIVE_LOG_LEVEL or INFO).",
    )
    return parser.parse_args(argv)


def build_providers(config: TraversalConfig) -> tuple[RouteProvider, LandmarkProvider]:
    if config.route:
        route_provider: RouteProvider = StaticRouteProvider(config.route)
    else:
        route_provider = DirectionsFileProvider(config.directions_file)

    landmarks = list(config.landmarks)
    if config.landmarks_file is not None:
        landmarks.extend(load_landmarks(config.landmarks_file))
    return route_provider, StaticLandmarkProvider(landmarks)


def _print_report(messages: List[str], steps: int) -> None:
    for message in messages:
        print(message)
    print(f"Completed {steps} steps.")


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s │ %(name)s │ %(message)s")

    config = load_config(args.config)
    region = BoundingBox.from_sequence(config.region) if config.region else None
    try:
        route_provider, landmark_provider = build_providers(config)
        route = route_provider.get_route(config.origin, config.destination)
        landmarks = landmark_provider.get_landmarks(region)
    except (NoRouteFound, GeocodeFailed) as exc:
        print(f"Unable to start the drive: {exc}")
        return 1
    log.info("Route has %d points, %d landmarks in range", len(route), len(landmarks))

    if args.headless:
        report = simulate(
            route,
            landmarks,
            threshold=config.proximity_threshold,
            crossing_ttl_ms=config.notification_ttl_ms,
            completion_ttl_ms=config.completion_ttl_ms,
        )
        _print_report(report.messages, report.steps)
        return 0

    from .renderer import TraversalRenderer

    renderer = TraversalRenderer(config, route, landmarks)
    output_path = renderer.render(args.output)
    print(f"Saved animation to {output_path}")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
