"""Full-day tracking pipeline.

Encapsulates fetching one entity's fixes for a day, refining them, and
reconciling them against the routing services. ``TrackingPipeline.run`` is
re-entrant: each call takes a new generation number, and only the newest
generation may publish its result as :attr:`TrackingPipeline.latest`. An older
run that is still in flight stops at its next network boundary and returns a
``STALE`` result instead of overwriting newer output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
import logging
import threading
from typing import Any, Dict, List, Optional

from ..clients.tracking import TrackingSourceClient
from ..errors import DataUnavailableError, ServiceError
from ..geometry import filter_by_accuracy
from ..models import Fix, LatLon
from ..utils import to_jsonable
from .reconciler import ReconcilerState, ReconciliationResult, RouteReconciler
from .refinement import RefinementSettings, refine_track

GENERIC_FAILURE_NOTICE = "Error loading map data."
NO_DATA_NOTICE = "Not enough location data for this day."
ROUTE_FAILURE_NOTICE = "Road route could not be fully reconstructed."


class PipelineStatus(str, Enum):
    OK = "ok"
    NO_DATA = "no_data"
    FETCH_FAILED = "fetch_failed"
    ROUTE_FAILED = "route_failed"
    STALE = "stale"


@dataclass(slots=True)
class PipelineResult:
    """Everything the presentation layer needs for one entity-day."""

    entity_id: str
    day: str
    generation: int
    status: PipelineStatus
    raw_fixes: List[Fix] = field(default_factory=list)
    accepted_fixes: List[Fix] = field(default_factory=list)
    refined_points: List[Fix] = field(default_factory=list)
    snapped_points: List[Fix] = field(default_factory=list)
    route_points: List[LatLon] = field(default_factory=list)
    refined_distance_m: float = 0.0
    routed_distance_m: Optional[float] = None
    notice: Optional[str] = None
    reconciliation: Optional[ReconciliationResult] = None

    @property
    def display_distance_m(self) -> float:
        """Routed distance when a road route exists, otherwise the refined distance."""

        if self.route_points and self.routed_distance_m is not None:
            return self.routed_distance_m
        return self.refined_distance_m

    def to_dict(self) -> Dict[str, Any]:
        reconciliation = self.reconciliation
        return to_jsonable(
            {
                "entity_id": self.entity_id,
                "day": self.day,
                "generation": self.generation,
                "status": self.status,
                "notice": self.notice,
                "raw_fixes": self.raw_fixes,
                "accepted_fixes": self.accepted_fixes,
                "refined_points": self.refined_points,
                "snapped_points": self.snapped_points,
                "route_points": self.route_points,
                "refined_distance_m": self.refined_distance_m,
                "routed_distance_m": self.routed_distance_m,
                "display_distance_m": self.display_distance_m,
                "reconciliation": None
                if reconciliation is None
                else {
                    "state": reconciliation.state,
                    "chunk_count": reconciliation.chunk_count,
                    "chunks_completed": reconciliation.chunks_completed,
                    "chunks_skipped": reconciliation.chunks_skipped,
                    "truncated": reconciliation.truncated,
                    "error": reconciliation.error,
                },
            }
        )


@dataclass(slots=True)
class PipelineConfig:
    source: TrackingSourceClient | None = None
    reconciler: RouteReconciler | None = None
    refinement: RefinementSettings = field(default_factory=RefinementSettings)
    logger: logging.Logger | None = None


class TrackingPipeline:
    def __init__(self, config: PipelineConfig | None = None):
        self.config = config or PipelineConfig()
        self._source = self.config.source or TrackingSourceClient()
        self._reconciler = self.config.reconciler or RouteReconciler()
        self._log = self.config.logger or logging.getLogger(self.__class__.__name__)
        self._lock = threading.Lock()
        self._generation = 0
        self._latest: Optional[PipelineResult] = None

    @property
    def latest(self) -> Optional[PipelineResult]:
        """Result of the most recently started run, once it has finished."""

        with self._lock:
            return self._latest

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def run(self, entity_id: str, day: date | str) -> PipelineResult:
        """Run the full pipeline for one entity-day; never raises service errors."""

        day_text = day.isoformat() if isinstance(day, date) else str(day)
        generation = self._begin()

        def is_stale() -> bool:
            return not self._is_current(generation)

        def stale() -> PipelineResult:
            self._log.info(
                "Discarding superseded run generation=%d entity=%s day=%s",
                generation,
                entity_id,
                day_text,
            )
            return PipelineResult(
                entity_id=entity_id,
                day=day_text,
                generation=generation,
                status=PipelineStatus.STALE,
            )

        self._log.info(
            "Pipeline run generation=%d entity=%s day=%s",
            generation,
            entity_id,
            day_text,
        )
        try:
            raw_fixes = self._source.fetch_day(entity_id, day_text)
        except ServiceError as exc:
            self._log.error(
                "Failed to fetch fixes entity=%s day=%s: %s", entity_id, day_text, exc
            )
            return self._publish(
                PipelineResult(
                    entity_id=entity_id,
                    day=day_text,
                    generation=generation,
                    status=PipelineStatus.FETCH_FAILED,
                    notice=GENERIC_FAILURE_NOTICE,
                )
            )
        if is_stale():
            return stale()

        result = PipelineResult(
            entity_id=entity_id,
            day=day_text,
            generation=generation,
            status=PipelineStatus.OK,
            raw_fixes=raw_fixes,
        )
        try:
            track = refine_track(raw_fixes, self.config.refinement, logger=self._log)
        except DataUnavailableError as exc:
            self._log.info("No usable track entity=%s day=%s: %s", entity_id, day_text, exc)
            result.status = PipelineStatus.NO_DATA
            result.notice = NO_DATA_NOTICE
            result.accepted_fixes = filter_by_accuracy(
                raw_fixes, self.config.refinement.accuracy_threshold_m
            )
            return self._publish(result)

        result.accepted_fixes = track.accepted
        result.refined_points = track.refined
        result.refined_distance_m = track.distance_m

        reconciliation = self._reconciler.reconcile(
            track.accepted, is_cancelled=is_stale
        )
        if reconciliation.state is ReconcilerState.CANCELLED or is_stale():
            return stale()
        result.reconciliation = reconciliation
        result.snapped_points = reconciliation.snapped_points
        result.route_points = reconciliation.route_points
        if reconciliation.chunks_completed:
            result.routed_distance_m = reconciliation.distance_m
        if reconciliation.state is ReconcilerState.FAILED:
            result.status = PipelineStatus.ROUTE_FAILED
            result.notice = ROUTE_FAILURE_NOTICE
        return self._publish(result)

    def _begin(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def _is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._generation

    def _publish(self, result: PipelineResult) -> PipelineResult:
        with self._lock:
            if result.generation == self._generation:
                self._latest = result
                return result
        self._log.info(
            "Run generation=%d finished after a newer run started; not published",
            result.generation,
        )
        result.status = PipelineStatus.STALE
        return result


__all__ = [
    "GENERIC_FAILURE_NOTICE",
    "PipelineConfig",
    "PipelineResult",
    "PipelineStatus",
    "TrackingPipeline",
]
