"""Route reconciliation against the snap-to-road and directions services.

The reconciler moves through named states::

    IDLE -> SNAPPING -> ROUTING -> DONE
              |           |
              +-> FAILED  +-> FAILED (earlier chunks kept)

``CANCELLED`` is entered when the owning pipeline run is superseded between
two network calls. Chunks are requested strictly one after another.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
import logging
from typing import Callable, List, Optional, Sequence

from ..clients.directions import DirectionsClient
from ..clients.snap import SnapClient
from ..errors import PolylineDecodeError, ServiceError
from ..geometry.polyline_codec import decode_polyline, precision_for_geometries
from ..models import Fix, LatLon


class ReconcilerState(str, Enum):
    IDLE = "idle"
    SNAPPING = "snapping"
    ROUTING = "routing"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(slots=True)
class ReconciliationResult:
    """Outcome of one reconciliation, including partial progress on failure."""

    state: ReconcilerState = ReconcilerState.IDLE
    snapped_points: List[Fix] = field(default_factory=list)
    route_points: List[LatLon] = field(default_factory=list)
    distance_m: float = 0.0
    chunk_count: int = 0
    chunks_completed: int = 0
    chunks_skipped: int = 0
    truncated: bool = False
    error: Optional[str] = None
    transitions: List[ReconcilerState] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        """True when the route covers fewer chunks than were planned."""

        return self.chunks_completed < self.chunk_count

    def _enter(self, state: ReconcilerState) -> None:
        self.state = state
        self.transitions.append(state)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class ReconcilerConfig:
    snap_client: SnapClient | None = None
    directions_client: DirectionsClient | None = None
    # Falls back to the directions client's own waypoint limit.
    max_waypoints: int | None = None
    clock: Callable[[], datetime] = _utcnow
    logger: logging.Logger | None = None


def chunk_waypoints(points: Sequence[Fix], size: int) -> List[List[Fix]]:
    """Split ``points`` into consecutive, non-overlapping chunks of at most ``size``."""

    if size < 2:
        raise ValueError("chunk size must be at least 2")
    return [list(points[start : start + size]) for start in range(0, len(points), size)]


class RouteReconciler:
    def __init__(self, config: ReconcilerConfig | None = None):
        self.config = config or ReconcilerConfig()
        self._snap = self.config.snap_client or SnapClient()
        self._directions = self.config.directions_client or DirectionsClient()
        self._log = self.config.logger or logging.getLogger(self.__class__.__name__)

    @property
    def chunk_size(self) -> int:
        """Waypoints per directions request, never above the client's own limit."""

        limit = getattr(self._directions, "max_waypoints", 25)
        if self.config.max_waypoints:
            return min(self.config.max_waypoints, limit)
        return limit

    def reconcile(
        self,
        fixes: Sequence[Fix],
        *,
        is_cancelled: Callable[[], bool] | None = None,
    ) -> ReconciliationResult:
        """Snap ``fixes`` to the road network and route through the snapped points.

        ``fixes`` should be the accuracy-filtered, unsmoothed trace. Service
        failures never propagate: they are recorded on the returned result.
        """

        cancelled = is_cancelled or (lambda: False)
        result = ReconciliationResult(transitions=[ReconcilerState.IDLE])

        result._enter(ReconcilerState.SNAPPING)
        try:
            matches = self._snap.snap(fixes)
        except ServiceError as exc:
            self._log.error("Snap failed for %d fixes: %s", len(fixes), exc)
            result.error = str(exc)
            result._enter(ReconcilerState.FAILED)
            return result

        # Match responses carry no timestamps of their own.
        snapped_at = self.config.clock()
        result.snapped_points = [
            Fix(latitude=match[0], longitude=match[1], captured_at=snapped_at)
            for match in matches
            if match is not None
        ]
        self._log.info(
            "Snapped %d/%d fixes", len(result.snapped_points), len(fixes)
        )
        if cancelled():
            result._enter(ReconcilerState.CANCELLED)
            return result

        result._enter(ReconcilerState.ROUTING)
        self._route_chunks(result, cancelled)
        if result.state is ReconcilerState.ROUTING:
            result._enter(ReconcilerState.DONE)
        self._log.info(
            "Reconciliation %s: chunks=%d completed=%d skipped=%d truncated=%s "
            "route_points=%d distance=%.1fm",
            result.state.value,
            result.chunk_count,
            result.chunks_completed,
            result.chunks_skipped,
            result.truncated,
            len(result.route_points),
            result.distance_m,
        )
        return result

    def _route_chunks(
        self, result: ReconciliationResult, cancelled: Callable[[], bool]
    ) -> None:
        chunks = chunk_waypoints(result.snapped_points, self.chunk_size)
        result.chunk_count = len(chunks)
        precision = precision_for_geometries(
            getattr(self._directions, "geometries", "polyline")
        )
        for index, chunk in enumerate(chunks):
            if len(chunk) < 2:
                self._log.info(
                    "Stopping before chunk %d/%d: %d waypoint(s) cannot form a route",
                    index + 1,
                    len(chunks),
                    len(chunk),
                )
                result.truncated = True
                return
            if index and cancelled():
                result._enter(ReconcilerState.CANCELLED)
                return
            try:
                route = self._directions.route(chunk)
            except ServiceError as exc:
                self._log.error(
                    "Directions chunk %d/%d failed: %s", index + 1, len(chunks), exc
                )
                result.error = str(exc)
                result._enter(ReconcilerState.FAILED)
                return
            if route is None:
                result.chunks_skipped += 1
                continue
            try:
                decoded = decode_polyline(route.geometry, precision)
            except PolylineDecodeError as exc:
                self._log.warning(
                    "Discarding chunk %d/%d with undecodable geometry: %s",
                    index + 1,
                    len(chunks),
                    exc,
                )
                result.chunks_skipped += 1
                continue
            result.route_points.extend(decoded)
            result.distance_m += route.distance_m
            result.chunks_completed += 1


__all__ = [
    "ReconcilerConfig",
    "ReconcilerState",
    "ReconciliationResult",
    "RouteReconciler",
    "chunk_waypoints",
]
