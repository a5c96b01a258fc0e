"""External service clients (trajectory source, snap-to-road, directions)."""

from .directions import DirectionsClient  # noqa: F401
from .session import create_default_session, get_default_session  # noqa: F401
from .snap import SnapClient  # noqa: F401
from .tracking import TrackingSourceClient  # noqa: F401
