"""Great-circle distance and bearing helpers on (lat, lon) coordinates."""

from __future__ import annotations

import math
from typing import Iterable, Union

import numpy as np
from numpy.typing import NDArray

from ..models import Fix, LatLon

EARTH_RADIUS_M = 6_371_000.0

PointLike = Union[Fix, LatLon]


def as_lat_lon(point: PointLike) -> LatLon:
    """Return a ``(lat, lon)`` float tuple for a fix or coordinate pair."""

    if isinstance(point, Fix):
        return point.latitude, point.longitude
    lat, lon = point
    return float(lat), float(lon)


def distance(a: PointLike, b: PointLike) -> float:
    """Return the haversine distance between two points in metres.

    No range validation is performed; out-of-range degrees still produce a
    finite (if meaningless) result.
    """

    lat1, lon1 = as_lat_lon(a)
    lat2, lon2 = as_lat_lon(b)
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    h = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # Rounding can push h a hair outside [0, 1] for antipodal points.
    h = min(max(h, 0.0), 1.0)
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def bearing(a: PointLike, b: PointLike) -> float:
    """Return the initial bearing from ``a`` to ``b`` in degrees within [0, 360)."""

    lat1, lon1 = as_lat_lon(a)
    lat2, lon2 = as_lat_lon(b)
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_lambda = math.radians(lon2 - lon1)
    y = math.sin(d_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(
        d_lambda
    )
    return (math.degrees(math.atan2(y, x)) + 360.0) % 360.0


def cumulative_distances(points: Iterable[PointLike]) -> NDArray[np.float64]:
    """Return running path distances (metres), starting at 0 for the first point."""

    coords = _as_coordinate_array(points)
    if coords.shape[0] == 0:
        return np.zeros(0, dtype=float)
    steps = _segment_lengths(coords)
    return np.concatenate(([0.0], np.cumsum(steps)))


def path_length(points: Iterable[PointLike]) -> float:
    """Return the summed haversine length of a point sequence in metres."""

    coords = _as_coordinate_array(points)
    if coords.shape[0] < 2:
        return 0.0
    return float(np.sum(_segment_lengths(coords)))


def _segment_lengths(coords: NDArray[np.float64]) -> NDArray[np.float64]:
    """Vectorised haversine distance between consecutive rows."""

    if coords.shape[0] < 2:
        return np.zeros(0, dtype=float)
    lat = np.radians(coords[:, 0])
    lon = np.radians(coords[:, 1])
    d_lat = np.diff(lat)
    d_lon = np.diff(lon)
    h = np.sin(d_lat / 2) ** 2 + np.cos(lat[:-1]) * np.cos(lat[1:]) * np.sin(
        d_lon / 2
    ) ** 2
    h = np.clip(h, 0.0, 1.0)
    return EARTH_RADIUS_M * 2 * np.arctan2(np.sqrt(h), np.sqrt(1 - h))


def _as_coordinate_array(points: Iterable[PointLike]) -> NDArray[np.float64]:
    """Convert fixes or coordinate pairs into a float64 array of shape (N, 2)."""

    rows = [as_lat_lon(point) for point in points]
    if not rows:
        return np.empty((0, 2), dtype=float)
    return np.asarray(rows, dtype=float)


__all__ = [
    "EARTH_RADIUS_M",
    "PointLike",
    "as_lat_lon",
    "bearing",
    "cumulative_distances",
    "distance",
    "path_length",
]
