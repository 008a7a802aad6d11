"""Keep a drawing surface in step with the traversal state, without duplicates."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from html import escape
from typing import AbstractSet, Any, Dict, Mapping, Optional, Sequence, Tuple

from .config import Landmark
from .errors import ContractViolation
from .geometry import Coordinate
from .surface import LANDMARK, VEHICLE, DrawingSurface, MarkerHandle

log = logging.getLogger("landmarkdrive.render_sync")

ROUTE_LINE_ID = "route"
DEFAULT_LINE_STYLE: Mapping[str, Any] = {"line-color": "#0074D9", "line-width": 8}


@dataclass(frozen=True)
class RenderSnapshot:
    route: Optional[Tuple[Coordinate, ...]]
    position: Optional[Coordinate]
    landmarks: Sequence[Landmark] = ()
    visited: AbstractSet[str] = field(default_factory=frozenset)


def landmark_popup(landmark: Landmark) -> str:
    return f"<div><strong>{escape(landmark.name)}</strong></div>"


class RenderSync:
    """Reconcile one surface with successive :class:`RenderSnapshot` values.

    The surface holds at most one route line (id ``"route"``), at most one
    vehicle marker and exactly one marker with popup per visited landmark.
    Handles of what has been drawn are remembered so that repeated calls move
    or leave things in place instead of stacking new artists.
    """

    def __init__(self, line_style: Optional[Mapping[str, Any]] = None) -> None:
        self.line_style = dict(line_style or DEFAULT_LINE_STYLE)
        self._route: Optional[Tuple[Coordinate, ...]] = None
        self._vehicle: Optional[MarkerHandle] = None
        self._landmarks: Dict[str, MarkerHandle] = {}

    @property
    def reflected_landmarks(self) -> Tuple[str, ...]:
        return tuple(self._landmarks)

    def reconcile(self, surface: DrawingSurface, snapshot: RenderSnapshot) -> None:
        by_name = {landmark.name: landmark for landmark in snapshot.landmarks}
        unknown = set(snapshot.visited) - set(by_name)
        if unknown:
            raise ContractViolation(f"Visited landmarks missing from landmark set: {sorted(unknown)}")

        self._sync_route(surface, snapshot.route)
        self._sync_vehicle(surface, snapshot.position)
        self._sync_landmarks(surface, snapshot.landmarks, snapshot.visited)

    def _sync_route(self, surface: DrawingSurface, route: Optional[Tuple[Coordinate, ...]]) -> None:
        if route is not None and not isinstance(route, tuple):
            route = tuple(route)
        # identity first: the controller hands over the same tuple on every step
        if route is self._route or route == self._route:
            return
        if self._route is not None:
            surface.remove_line(ROUTE_LINE_ID)
            self._route = None
        if route is not None:
            if surface.has_line(ROUTE_LINE_ID):
                surface.remove_line(ROUTE_LINE_ID)
            surface.draw_line(ROUTE_LINE_ID, route, self.line_style)
            self._route = route
            log.debug("Drew route line with %d points", len(route))

    def _sync_vehicle(self, surface: DrawingSurface, position: Optional[Coordinate]) -> None:
        if position is None:
            return
        if self._vehicle is None:
            self._vehicle = surface.place_marker(position, kind=VEHICLE)
        else:
            surface.move_marker(self._vehicle, position)

    def _sync_landmarks(
        self,
        surface: DrawingSurface,
        landmarks: Sequence[Landmark],
        visited: AbstractSet[str],
    ) -> None:
        for name in [name for name in self._landmarks if name not in visited]:
            surface.remove_marker(self._landmarks.pop(name))

        for landmark in landmarks:
            if landmark.name not in visited or landmark.name in self._landmarks:
                continue
            handle = surface.place_marker(landmark.coordinates, kind=LANDMARK)
            surface.attach_popup(handle, landmark_popup(landmark))
            self._landmarks[landmark.name] = handle
            log.debug("Placed marker for landmark %s", landmark.name)
