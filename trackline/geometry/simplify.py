"""Zigzag removal and distance-based thinning of smoothed traces."""

from __future__ import annotations

from typing import List, Sequence, TypeVar

from ..config import THIN_MIN_DISTANCE_M, ZIGZAG_THRESHOLD_DEG
from .geo import PointLike, bearing, distance

P = TypeVar("P", bound=PointLike)


def heading_change(prev: PointLike, curr: PointLike, nxt: PointLike) -> float:
    """Return the absolute turn at ``curr`` in degrees, within [0, 180]."""

    diff = abs(bearing(curr, nxt) - bearing(prev, curr))
    if diff > 180.0:
        diff = 360.0 - diff
    return diff


def remove_zigzags(points: Sequence[P], threshold_deg: float = ZIGZAG_THRESHOLD_DEG) -> List[P]:
    """Drop interior points where the heading turns by ``threshold_deg`` or more.

    Each interior point is judged against its neighbours in the input sequence.
    The first and last points are always kept. Sequences shorter than three
    points are returned as a new list without inspection.
    """

    if len(points) < 3:
        return list(points)
    kept: List[P] = [points[0]]
    for index in range(1, len(points) - 1):
        turn = heading_change(points[index - 1], points[index], points[index + 1])
        if turn < threshold_deg:
            kept.append(points[index])
    kept.append(points[-1])
    return kept


def thin_points(points: Sequence[P], min_distance_m: float = THIN_MIN_DISTANCE_M) -> List[P]:
    """Greedily keep points at least ``min_distance_m`` from the last kept point.

    The first point is always kept. Decisions are never revisited, and the
    final point is only kept when it clears the threshold itself.
    """

    if len(points) < 2:
        return list(points)
    kept: List[P] = [points[0]]
    for point in points[1:]:
        if distance(kept[-1], point) >= min_distance_m:
            kept.append(point)
    return kept


__all__ = ["heading_change", "remove_zigzags", "thin_points"]
