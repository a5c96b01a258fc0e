"""Client for the snap-to-road service (openrouteservice ``/v2/snap``)."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from requests import Session

from .. import config
from ..errors import SnapServiceError
from ..models import Fix, LatLon
from .response_handling import mask_secret, request_json
from .session import get_default_session

LOGGER = logging.getLogger(__name__)

SnapResult = List[Optional[LatLon]]


class SnapClient:
    """Match raw fixes onto the nearest road segment in one request."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        profile: str | None = None,
        radius_m: float | None = None,
        api_key: str | None = None,
        session: Session | None = None,
    ) -> None:
        self.base_url = (base_url if base_url is not None else config.SNAP_BASE_URL).rstrip("/")
        self.profile = profile or config.SNAP_PROFILE
        self.radius_m = radius_m if radius_m is not None else config.SNAP_RADIUS_M
        self.api_key = api_key if api_key is not None else config.SNAP_API_KEY
        self._session = session or get_default_session()

    @property
    def url(self) -> str:
        return f"{self.base_url}/v2/snap/{self.profile}"

    def snap(self, points: Sequence[Fix]) -> SnapResult:
        """Return one matched (lat, lon) or ``None`` per input fix, in input order."""

        if not points:
            return []
        headers: Dict[str, str] = {"Content-Type": "application/json; charset=utf-8"}
        if self.api_key:
            headers["Authorization"] = self.api_key
            LOGGER.debug("Snap request key=%s", mask_secret(self.api_key))
        payload = {
            "locations": [list(point.lon_lat) for point in points],
            "radius": self.radius_m,
        }
        LOGGER.info(
            "Snapping %d locations profile=%s radius=%sm",
            len(points),
            self.profile,
            self.radius_m,
        )
        body = request_json(
            self._session,
            "POST",
            self.url,
            context="Snap",
            error_cls=SnapServiceError,
            json=payload,
            headers=headers,
        )
        return parse_snap_locations(body, expected=len(points))


def parse_snap_locations(body: Any, *, expected: int) -> SnapResult:
    """Extract the parallel-indexed list of matched locations from a snap response."""

    locations = body.get("locations") if isinstance(body, dict) else None
    if not isinstance(locations, list):
        raise SnapServiceError("Snap response has no locations array")
    if len(locations) != expected:
        raise SnapServiceError(
            f"Snap response has {len(locations)} locations for {expected} inputs"
        )
    return [_parse_location(entry) for entry in locations]


def _parse_location(entry: Any) -> Optional[LatLon]:
    if not isinstance(entry, dict):
        return None
    location = entry.get("location")
    if not isinstance(location, (list, tuple)) or len(location) < 2:
        return None
    try:
        lon = float(location[0])
        lat = float(location[1])
    except (TypeError, ValueError):
        return None
    return (lat, lon)


__all__ = ["SnapClient", "SnapResult", "parse_snap_locations"]
