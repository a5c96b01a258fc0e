"""Trajectory refinement and route reconciliation for daily GPS traces."""

from .main import main
from .models import DirectionsRoute, Fix
from .errors import PolylineDecodeError, ServiceError, TracklineError
from .services import PipelineResult, PipelineStatus, TrackingPipeline

__all__ = [
    "main",
    "Fix",
    "DirectionsRoute",
    "PipelineResult",
    "PipelineStatus",
    "TrackingPipeline",
    "PolylineDecodeError",
    "ServiceError",
    "TracklineError",
]
