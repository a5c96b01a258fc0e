"""Trajectory refinement service.

Runs the pure geometry stages in order: accuracy gate, Kalman smoothing,
zigzag removal, thinning, and path length of the result. Each stage runs to
completion before the next starts since several of them inspect neighbours.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import List, Sequence

from ..config import (
    ACCURACY_THRESHOLD_M,
    THIN_MIN_DISTANCE_M,
    ZIGZAG_THRESHOLD_DEG,
)
from ..errors import DataUnavailableError
from ..geometry import (
    KalmanSmoother,
    filter_by_accuracy,
    path_length,
    remove_zigzags,
    thin_points,
)
from ..models import Fix

MIN_TRACK_POINTS = 2


@dataclass(frozen=True, slots=True)
class RefinementSettings:
    accuracy_threshold_m: float = ACCURACY_THRESHOLD_M
    zigzag_threshold_deg: float = ZIGZAG_THRESHOLD_DEG
    thin_min_distance_m: float = THIN_MIN_DISTANCE_M
    smoother: KalmanSmoother = field(default_factory=KalmanSmoother)


@dataclass(slots=True)
class RefinedTrack:
    """Intermediate and final sequences produced by :func:`refine_track`."""

    accepted: List[Fix]
    smoothed: List[Fix]
    refined: List[Fix]
    distance_m: float


def refine_track(
    fixes: Sequence[Fix],
    settings: RefinementSettings | None = None,
    *,
    logger: logging.Logger | None = None,
) -> RefinedTrack:
    """Return the refined path for a day's raw fixes.

    Raises:
        DataUnavailableError: If fewer than two fixes pass the accuracy gate.
    """

    settings = settings or RefinementSettings()
    log = logger or logging.getLogger(__name__)

    accepted = filter_by_accuracy(fixes, settings.accuracy_threshold_m)
    log.debug(
        "Accuracy gate kept %d/%d fixes (threshold=%sm)",
        len(accepted),
        len(fixes),
        settings.accuracy_threshold_m,
    )
    if len(accepted) < MIN_TRACK_POINTS:
        raise DataUnavailableError(
            f"Only {len(accepted)} fixes passed the accuracy gate; "
            f"need at least {MIN_TRACK_POINTS}"
        )

    smoothed = settings.smoother.smooth(accepted)
    dezigzagged = remove_zigzags(smoothed, settings.zigzag_threshold_deg)
    refined = thin_points(dezigzagged, settings.thin_min_distance_m)
    distance_m = path_length(refined)
    log.info(
        "Refined track: accepted=%d dezigzagged=%d thinned=%d distance=%.1fm",
        len(accepted),
        len(dezigzagged),
        len(refined),
        distance_m,
    )
    return RefinedTrack(
        accepted=accepted,
        smoothed=smoothed,
        refined=refined,
        distance_m=distance_m,
    )


__all__ = ["MIN_TRACK_POINTS", "RefinedTrack", "RefinementSettings", "refine_track"]
