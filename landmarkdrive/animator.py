"""Frame driven stepping of a vehicle along a route."""
from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol, Sequence, Tuple

from .errors import InvalidRouteError
from .geometry import Coordinate, as_coordinate

log = logging.getLogger("landmarkdrive.animator")

Route = Tuple[Coordinate, ...]
StepCallback = Callable[[Coordinate, int], None]
CompleteCallback = Callable[[], None]


class FrameScheduler(Protocol):
    """The host display's per-frame callback hook (``requestAnimationFrame`` style)."""

    def request_frame(self, callback: Callable[[], None]) -> int:
        ...

    def cancel_frame(self, handle: int) -> None:
        ...


class ManualFrameScheduler:
    """A frame scheduler advanced explicitly by calling :meth:`tick`.

    Callbacks requested while a tick is running are deferred to the next tick,
    so each animation advances at most one step per frame.
    """

    def __init__(self) -> None:
        self._pending: Dict[int, Callable[[], None]] = {}
        self._due: Dict[int, Callable[[], None]] = {}
        self._handles = itertools.count(1)
        self.frame = 0

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request_frame(self, callback: Callable[[], None]) -> int:
        handle = next(self._handles)
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: int) -> None:
        self._pending.pop(handle, None)
        self._due.pop(handle, None)

    def tick(self) -> int:
        """Run the callbacks queued before this frame; return how many ran."""

        self._due, self._pending = self._pending, {}
        self.frame += 1
        ran = 0
        try:
            while self._due:
                handle = next(iter(self._due))
                callback = self._due.pop(handle)
                callback()
                ran += 1
        finally:
            self._due = {}
        return ran


def validate_route(route: Any) -> Route:
    """Return ``route`` as an immutable tuple of coordinates or raise :class:`InvalidRouteError`."""

    if route is None or isinstance(route, (str, bytes, dict)):
        raise InvalidRouteError(f"Route must be a sequence of [lon, lat] pairs, got {type(route).__name__}")
    try:
        points = tuple(as_coordinate(point) for point in route)
    except (TypeError, ValueError) as exc:
        raise InvalidRouteError(f"Malformed route: {exc}") from exc
    if not points:
        raise InvalidRouteError("Route must contain at least one coordinate.")
    return points


@dataclass
class AnimationState:
    route: Route
    current_index: int = 0
    running: bool = False


class PathAnimator:
    """Advance a position along a route, one index per scheduled frame."""

    def __init__(self, scheduler: FrameScheduler) -> None:
        self._scheduler = scheduler
        self._state: Optional[AnimationState] = None
        self._handle: Optional[int] = None
        # bumped on every start/cancel; frames from older runs see a mismatch and return
        self._generation = 0

    @property
    def state(self) -> Optional[AnimationState]:
        return self._state

    @property
    def running(self) -> bool:
        return self._state is not None and self._state.running

    def start(
        self,
        route: Sequence[Coordinate],
        on_step: StepCallback,
        on_complete: CompleteCallback,
    ) -> None:
        points = validate_route(route)
        if self.running:
            raise RuntimeError("Animation already running; cancel() it before starting another.")

        self._generation += 1
        self._state = AnimationState(route=points, current_index=0, running=True)
        generation = self._generation
        log.debug("Starting animation over %d points", len(points))

        def frame() -> None:
            state = self._state
            if generation != self._generation or state is None or not state.running:
                return
            index = state.current_index
            on_step(state.route[index], index)
            # on_step may have cancelled or restarted the animation
            if generation != self._generation or not state.running:
                return
            state.current_index = index + 1
            if state.current_index >= len(state.route):
                state.running = False
                self._handle = None
                on_complete()
            else:
                self._handle = self._scheduler.request_frame(frame)

        self._handle = self._scheduler.request_frame(frame)

    def cancel(self) -> None:
        """Stop stepping; no callback fires afterwards. Safe to call when idle."""

        self._generation += 1
        if self._handle is not None:
            self._scheduler.cancel_frame(self._handle)
            self._handle = None
        if self._state is not None and self._state.running:
            self._state.running = False
            log.debug("Cancelled animation at index %d", self._state.current_index)
