"""Central error types used across the application."""

from __future__ import annotations


class TracklineError(RuntimeError):
    """Base error for trajectory processing failures."""


class DataUnavailableError(TracklineError):
    """Raised when a day holds too few usable fixes to build a trajectory."""


class ServiceError(TracklineError):
    """Base error for external service failures."""


class TrackingSourceError(ServiceError):
    """Raised when the trajectory source cannot be queried."""


class SnapServiceError(ServiceError):
    """Raised when the snap-to-road request fails or returns an unusable payload."""


class DirectionsServiceError(ServiceError):
    """Raised when a directions request fails or returns an unusable payload."""


class PolylineDecodeError(TracklineError, ValueError):
    """Raised when an encoded polyline string is truncated or malformed."""


__all__ = [
    "TracklineError",
    "DataUnavailableError",
    "ServiceError",
    "TrackingSourceError",
    "SnapServiceError",
    "DirectionsServiceError",
    "PolylineDecodeError",
]
