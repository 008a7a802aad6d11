"""Route traversal and landmark proximity engine."""

from .animator import ManualFrameScheduler, PathAnimator
from .config import Landmark, TraversalConfig, VehicleConfig, load_config
from .controller import TraversalController, TraversalReport, TraversalState, simulate
from .errors import ContractViolation, GeocodeFailed, InvalidRouteError, NoRouteFound
from .notifications import Notification, NotificationQueue
from .proximity import ProximityDetector
from .render_sync import RenderSnapshot, RenderSync

__all__ = [
    "ContractViolation",
    "GeocodeFailed",
    "InvalidRouteError",
    "Landmark",
    "ManualFrameScheduler",
    "NoRouteFound",
    "Notification",
    "NotificationQueue",
    "PathAnimator",
    "ProximityDetector",
    "RenderSnapshot",
    "RenderSync",
    "TraversalConfig",
    "TraversalController",
    "TraversalReport",
    "TraversalState",
    "VehicleConfig",
    "load_config",
    "simulate",
]
