"""GPS geometry processing utilities for trajectory refinement.

This package holds the pure, I/O-free stages of the pipeline: great-circle
math, the accuracy gate, Kalman smoothing, zigzag removal, thinning and the
encoded polyline codec.
"""

from .filtering import filter_by_accuracy, passes_accuracy
from .geo import (
    EARTH_RADIUS_M,
    as_lat_lon,
    bearing,
    cumulative_distances,
    distance,
    path_length,
)
from .polyline_codec import decode_polyline, encode_polyline, precision_for_geometries
from .simplify import heading_change, remove_zigzags, thin_points
from .smoothing import KalmanSmoother, KalmanState, kalman_smooth

__all__ = [
    "EARTH_RADIUS_M",
    "as_lat_lon",
    "bearing",
    "cumulative_distances",
    "distance",
    "path_length",
    "filter_by_accuracy",
    "passes_accuracy",
    "KalmanSmoother",
    "KalmanState",
    "kalman_smooth",
    "heading_change",
    "remove_zigzags",
    "thin_points",
    "decode_polyline",
    "encode_polyline",
    "precision_for_geometries",
]
