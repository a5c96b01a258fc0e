"""Dataclasses describing GPS fixes and external service results."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple


LatLon = Tuple[float, float]


@dataclass(frozen=True, slots=True)
class Fix:
    """A single GPS sample for one entity."""

    latitude: float
    longitude: float
    captured_at: Optional[datetime] = None
    accuracy: Optional[float] = None

    @property
    def lat_lon(self) -> LatLon:
        return (self.latitude, self.longitude)

    @property
    def lon_lat(self) -> Tuple[float, float]:
        """Coordinate pair in the [longitude, latitude] order used on the wire."""

        return (self.longitude, self.latitude)


@dataclass(slots=True)
class DirectionsRoute:
    """First route returned for one chunk of waypoints."""

    distance_m: float
    geometry: str
    duration_s: Optional[float] = None
