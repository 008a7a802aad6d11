"""Landmark crossing detection."""
from __future__ import annotations

from typing import AbstractSet, Iterable, List

from .config import Landmark
from .geometry import Coordinate, planar_distance

DEFAULT_THRESHOLD = 0.05


class ProximityDetector:
    """Decide which landmarks a position crosses for the first time.

    Distances are planar in degree units with no geodesic correction, so the
    effective ground radius shrinks in longitude as latitude grows.
    """

    def __init__(self, threshold: float = DEFAULT_THRESHOLD) -> None:
        if threshold <= 0:
            raise ValueError(f"Proximity threshold must be positive, got {threshold}")
        self.threshold = float(threshold)

    @staticmethod
    def distance_to(position: Coordinate, landmark: Landmark) -> float:
        return planar_distance(position, landmark.coordinates)

    def evaluate(
        self,
        position: Coordinate,
        landmarks: Iterable[Landmark],
        visited: AbstractSet[str],
    ) -> List[Landmark]:
        """Return the landmarks within the threshold of ``position`` not yet in ``visited``.

        ``visited`` is never modified; the caller commits the returned names.
        Results keep the iteration order of ``landmarks``.
        """

        return [
            landmark
            for landmark in landmarks
            if landmark.name not in visited and self.distance_to(position, landmark) < self.threshold
        ]
