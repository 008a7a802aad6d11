"""Traversal state machine tying the animator, detector, queue and renderer together."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, FrozenSet, List, Optional, Sequence, Tuple

from .animator import FrameScheduler, ManualFrameScheduler, PathAnimator, Route, validate_route
from .config import Landmark, check_unique_names
from .geometry import Coordinate
from .notifications import NotificationQueue
from .proximity import ProximityDetector
from .render_sync import RenderSnapshot, RenderSync
from .surface import DrawingSurface

log = logging.getLogger("landmarkdrive.controller")

CROSSING_TTL_MS = 5000
COMPLETION_TTL_MS = 5000
DESTINATION_REACHED = "You have reached your destination!"


def crossing_message(landmark: Landmark) -> str:
    return f"You have crossed the landmark: {landmark.name}"


class TraversalState(Enum):
    IDLE = "idle"
    ANIMATING = "animating"
    COMPLETED = "completed"


class TraversalController:
    """Drive one simulated journey at a time.

    ``begin_traversal`` is accepted in every state; a journey already in
    progress is cancelled first and the visited set starts over empty.
    """

    def __init__(
        self,
        scheduler: FrameScheduler,
        *,
        surface: Optional[DrawingSurface] = None,
        notifications: Optional[NotificationQueue] = None,
        detector: Optional[ProximityDetector] = None,
        render_sync: Optional[RenderSync] = None,
        crossing_ttl_ms: int = CROSSING_TTL_MS,
        completion_ttl_ms: int = COMPLETION_TTL_MS,
        on_crossing: Optional[Callable[[Landmark], None]] = None,
        on_complete: Optional[Callable[[], None]] = None,
    ) -> None:
        self.surface = surface
        self.notifications = notifications if notifications is not None else NotificationQueue()
        self.detector = detector or ProximityDetector()
        self.render_sync = render_sync or RenderSync()
        self.crossing_ttl_ms = crossing_ttl_ms
        self.completion_ttl_ms = completion_ttl_ms
        self.on_crossing = on_crossing
        self.on_complete = on_complete

        self._animator = PathAnimator(scheduler)
        self._state = TraversalState.IDLE
        self._route: Optional[Route] = None
        self._landmarks: Tuple[Landmark, ...] = ()
        self._visited: set = set()
        self._crossings: List[Landmark] = []
        self._position: Optional[Coordinate] = None
        self._index: Optional[int] = None
        self._traversal = 0

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> TraversalState:
        return self._state

    @property
    def visited(self) -> FrozenSet[str]:
        return frozenset(self._visited)

    @property
    def crossings(self) -> Tuple[Landmark, ...]:
        return tuple(self._crossings)

    @property
    def route(self) -> Optional[Route]:
        return self._route

    @property
    def landmarks(self) -> Tuple[Landmark, ...]:
        return self._landmarks

    @property
    def position(self) -> Optional[Coordinate]:
        return self._position

    @property
    def index(self) -> Optional[int]:
        return self._index

    def snapshot(self) -> RenderSnapshot:
        return RenderSnapshot(
            route=self._route,
            position=self._position,
            landmarks=self._landmarks,
            visited=self.visited,
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def begin_traversal(self, route: Sequence[Coordinate], landmarks: Sequence[Landmark] = ()) -> None:
        points = validate_route(route)
        landmarks = tuple(landmarks)
        check_unique_names(landmarks)

        self._animator.cancel()
        self._traversal += 1
        self._route = points
        self._landmarks = landmarks
        self._visited = set()
        self._crossings = []
        self._position = points[0]
        self._index = None
        self._state = TraversalState.ANIMATING
        log.info("Starting traversal over %d points with %d landmarks", len(points), len(landmarks))

        self._render()
        self._animator.start(points, self._on_step, self._on_complete)

    def cancel(self) -> None:
        """Abandon the current traversal, keeping what was drawn and visited."""

        self._animator.cancel()
        if self._state is TraversalState.ANIMATING:
            self._state = TraversalState.IDLE
            log.info("Traversal cancelled at index %s", self._index)

    def _on_step(self, position: Coordinate, index: int) -> None:
        self.notifications.expire()
        self._position = position
        self._index = index
        crossed = self.detector.evaluate(position, self._landmarks, self._visited)
        for landmark in crossed:
            self._visited.add(landmark.name)
            self._crossings.append(landmark)
            self.notifications.push(crossing_message(landmark), self.crossing_ttl_ms)
            log.info("Crossed landmark %s at step %d", landmark.name, index)
        self._render()
        if self.on_crossing is not None:
            traversal = self._traversal
            for landmark in crossed:
                self.on_crossing(landmark)
                # a handler that restarts the drive ends this step's deliveries
                if self._traversal != traversal:
                    break

    def _on_complete(self) -> None:
        self._state = TraversalState.COMPLETED
        self.notifications.push(DESTINATION_REACHED, self.completion_ttl_ms)
        log.info("Destination reached after %d landmark crossings", len(self._crossings))
        if self.on_complete is not None:
            self.on_complete()

    def _render(self) -> None:
        if self.surface is not None:
            self.render_sync.reconcile(self.surface, self.snapshot())


@dataclass
class TraversalReport:
    """Outcome of a headless :func:`simulate` run."""

    steps: int = 0
    crossed: List[str] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)
    visited: FrozenSet[str] = frozenset()
    completed: bool = False


def simulate(
    route: Sequence[Coordinate],
    landmarks: Sequence[Landmark] = (),
    *,
    threshold: Optional[float] = None,
    surface: Optional[DrawingSurface] = None,
    crossing_ttl_ms: int = CROSSING_TTL_MS,
    completion_ttl_ms: int = COMPLETION_TTL_MS,
) -> TraversalReport:
    """Run a full traversal on a manual frame scheduler and report what happened."""

    scheduler = ManualFrameScheduler()
    report = TraversalReport()

    def crossed(landmark: Landmark) -> None:
        report.crossed.append(landmark.name)
        report.messages.append(crossing_message(landmark))

    controller = TraversalController(
        scheduler,
        surface=surface,
        detector=ProximityDetector(threshold) if threshold is not None else None,
        crossing_ttl_ms=crossing_ttl_ms,
        completion_ttl_ms=completion_ttl_ms,
        on_crossing=crossed,
        on_complete=lambda: report.messages.append(DESTINATION_REACHED),
    )
    controller.begin_traversal(route, landmarks)
    while scheduler.pending:
        report.steps += scheduler.tick()

    report.visited = controller.visited
    report.completed = controller.state is TraversalState.COMPLETED
    return report
