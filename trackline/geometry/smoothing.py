"""Sequential Kalman smoothing of a GPS trace.

Latitude and longitude are filtered as two independent one-dimensional
streams in a single forward pass. There is no backward (RTS) smoothing step,
so each output point only depends on the measurements that precede it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Sequence

from ..config import (
    COORDINATE_PRECISION,
    KALMAN_INITIAL_COVARIANCE,
    KALMAN_MEASUREMENT_NOISE,
    KALMAN_PROCESS_NOISE,
)
from ..models import Fix


@dataclass(slots=True)
class KalmanState:
    """Estimate and error covariance for one axis."""

    estimate: float
    covariance: float

    def update(self, measurement: float, process_noise: float, measurement_noise: float) -> float:
        self.covariance = self.covariance + process_noise
        gain = self.covariance / (self.covariance + measurement_noise)
        self.estimate = self.estimate + gain * (measurement - self.estimate)
        self.covariance = (1 - gain) * self.covariance
        return self.estimate


@dataclass(frozen=True, slots=True)
class KalmanSmoother:
    """Constant-position Kalman filter applied per axis.

    Args:
        process_noise: ``q``, how far the true position may drift between fixes.
        measurement_noise: ``r``, expected variance of a single fix. Must be
            positive so the gain never divides by zero.
        initial_covariance: ``p`` before the first update.
        precision: Decimal places kept on smoothed coordinates.
    """

    process_noise: float = KALMAN_PROCESS_NOISE
    measurement_noise: float = KALMAN_MEASUREMENT_NOISE
    initial_covariance: float = KALMAN_INITIAL_COVARIANCE
    precision: int = COORDINATE_PRECISION

    def __post_init__(self) -> None:
        if self.measurement_noise <= 0:
            raise ValueError("measurement_noise must be greater than zero")
        if self.process_noise < 0:
            raise ValueError("process_noise must not be negative")

    def smooth(self, points: Sequence[Fix]) -> List[Fix]:
        """Return a smoothed copy of ``points`` with identical length and order.

        Both axis states are seeded from the first point and then updated once
        per point, the first included. That first update leaves the estimate
        where it is but collapses the covariance, so the first point comes back
        unchanged while the second is already a blend. Timestamps and accuracy
        are carried over from the originating fix.
        """

        if not points:
            return []
        first = points[0]
        lat_state = KalmanState(first.latitude, self.initial_covariance)
        lon_state = KalmanState(first.longitude, self.initial_covariance)
        lat_state.update(first.latitude, self.process_noise, self.measurement_noise)
        lon_state.update(first.longitude, self.process_noise, self.measurement_noise)
        smoothed = [first]
        for point in points[1:]:
            lat = lat_state.update(
                point.latitude, self.process_noise, self.measurement_noise
            )
            lon = lon_state.update(
                point.longitude, self.process_noise, self.measurement_noise
            )
            smoothed.append(
                replace(
                    point,
                    latitude=round(lat, self.precision),
                    longitude=round(lon, self.precision),
                )
            )
        return smoothed


def kalman_smooth(points: Sequence[Fix], smoother: KalmanSmoother | None = None) -> List[Fix]:
    """Smooth ``points`` with the default (or supplied) :class:`KalmanSmoother`."""

    return (smoother or KalmanSmoother()).smooth(points)


__all__ = ["KalmanSmoother", "KalmanState", "kalman_smooth"]
