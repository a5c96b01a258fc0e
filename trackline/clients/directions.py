"""Client for the turn-by-turn directions service (Mapbox Directions v5)."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from requests import Session

from .. import config
from ..errors import DirectionsServiceError
from ..geometry.geo import PointLike, as_lat_lon
from ..models import DirectionsRoute
from .response_handling import mask_secret, request_json
from .session import get_default_session

LOGGER = logging.getLogger(__name__)


def format_waypoints(points: Sequence[PointLike]) -> str:
    """Return the ``lon,lat;lon,lat`` path segment for a waypoint list."""

    parts = []
    for point in points:
        lat, lon = as_lat_lon(point)
        parts.append(f"{lon!r},{lat!r}")
    return ";".join(parts)


class DirectionsClient:
    """Request one route through an ordered list of waypoints."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        profile: str | None = None,
        access_token: str | None = None,
        geometries: str | None = None,
        overview: str | None = None,
        max_waypoints: int | None = None,
        session: Session | None = None,
    ) -> None:
        self.base_url = (
            base_url if base_url is not None else config.DIRECTIONS_BASE_URL
        ).rstrip("/")
        self.profile = profile or config.DIRECTIONS_PROFILE
        self.access_token = (
            access_token if access_token is not None else config.DIRECTIONS_ACCESS_TOKEN
        )
        self.geometries = geometries or config.DIRECTIONS_GEOMETRIES
        self.overview = overview or config.DIRECTIONS_OVERVIEW
        self.max_waypoints = max_waypoints or config.DIRECTIONS_MAX_WAYPOINTS
        self._session = session or get_default_session()

    def route(self, waypoints: Sequence[PointLike]) -> Optional[DirectionsRoute]:
        """Return the first route through ``waypoints``, or ``None`` if none exists.

        Raises:
            DirectionsServiceError: On missing credentials, an invalid waypoint
                count, transport/HTTP failures or a malformed response body.
        """

        if not self.access_token:
            raise DirectionsServiceError(
                "Directions access token not configured "
                "(TRACKLINE_DIRECTIONS_ACCESS_TOKEN missing)"
            )
        if len(waypoints) < 2 or len(waypoints) > self.max_waypoints:
            raise DirectionsServiceError(
                f"Directions request needs 2-{self.max_waypoints} waypoints, "
                f"got {len(waypoints)}"
            )
        url = (
            f"{self.base_url}/directions/v5/mapbox/{self.profile}/"
            f"{format_waypoints(waypoints)}"
        )
        params = {
            "access_token": self.access_token,
            "geometries": self.geometries,
            "overview": self.overview,
        }
        LOGGER.debug(
            "Directions request waypoints=%d profile=%s token=%s",
            len(waypoints),
            self.profile,
            mask_secret(self.access_token),
        )
        body = request_json(
            self._session,
            "GET",
            url,
            context="Directions",
            error_cls=DirectionsServiceError,
            params=params,
        )
        return parse_route(body)


def parse_route(body: Any) -> Optional[DirectionsRoute]:
    """Return the first route of a directions response.

    A well-formed body with an empty ``routes`` list yields ``None``; a body
    that is not an object, or a route missing its distance or geometry, is a
    contract violation.
    """

    if not isinstance(body, dict):
        raise DirectionsServiceError("Directions response is not an object")
    routes = body.get("routes")
    if routes is None or routes == []:
        LOGGER.warning(
            "Directions response has no route (code=%s)", body.get("code", "?")
        )
        return None
    if not isinstance(routes, list) or not isinstance(routes[0], dict):
        raise DirectionsServiceError("Directions response has a malformed routes array")
    first = routes[0]
    geometry = first.get("geometry")
    if not isinstance(geometry, str):
        raise DirectionsServiceError("Directions route geometry is not an encoded polyline")
    try:
        distance_m = float(first["distance"])
    except (KeyError, TypeError, ValueError) as exc:
        raise DirectionsServiceError("Directions route has no numeric distance") from exc
    duration = first.get("duration")
    return DirectionsRoute(
        distance_m=distance_m,
        geometry=geometry,
        duration_s=float(duration) if isinstance(duration, (int, float)) else None,
    )


__all__ = ["DirectionsClient", "format_waypoints", "parse_route"]
