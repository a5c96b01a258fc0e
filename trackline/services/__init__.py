from .pipeline import (  # noqa: F401
    PipelineConfig,
    PipelineResult,
    PipelineStatus,
    TrackingPipeline,
)
from .reconciler import (  # noqa: F401
    ReconcilerConfig,
    ReconcilerState,
    ReconciliationResult,
    RouteReconciler,
)
from .refinement import RefinedTrack, RefinementSettings, refine_track  # noqa: F401
