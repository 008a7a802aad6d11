"""Exceptions raised by the traversal engine and its collaborators."""
from __future__ import annotations


class LandmarkDriveError(Exception):
    """Base class for all package specific errors."""


class InvalidRouteError(LandmarkDriveError, ValueError):
    """Raised when a route is empty or is not a sequence of coordinates."""


class NoRouteFound(LandmarkDriveError):
    """Raised by a route provider when no route connects the requested places."""


class GeocodeFailed(LandmarkDriveError):
    """Raised when a place or landmark lookup cannot be resolved."""


class ContractViolation(LandmarkDriveError, AssertionError):
    """Raised when a caller breaks a precondition of the engine."""
