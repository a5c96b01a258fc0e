"""Client for the service returning one entity's fixes for a calendar day."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from requests import Session

from .. import config
from ..errors import TrackingSourceError
from ..models import Fix
from .response_handling import mask_secret, request_json
from .session import get_default_session

LOGGER = logging.getLogger(__name__)

# Epoch values above this are taken to be milliseconds (year 5138 in seconds).
_EPOCH_MS_THRESHOLD = 1e11


class TrackingSourceClient:
    """Fetch and normalise a day's raw fixes.

    A body without a ``data`` array is treated as "no data" rather than an
    error; only transport and HTTP failures raise :class:`TrackingSourceError`.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        day_path: str | None = None,
        api_token: str | None = None,
        session: Session | None = None,
    ) -> None:
        self.base_url = (base_url if base_url is not None else config.TRACKING_BASE_URL).rstrip("/")
        self.day_path = day_path if day_path is not None else config.TRACKING_DAY_PATH
        self.api_token = api_token if api_token is not None else config.TRACKING_API_TOKEN
        self._session = session or get_default_session()

    def fetch_day(self, entity_id: str, day: date | str) -> List[Fix]:
        """Return every well-formed fix recorded for ``entity_id`` on ``day``."""

        if not self.base_url:
            raise TrackingSourceError(
                "Tracking source not configured (TRACKLINE_TRACKING_BASE_URL missing)"
            )
        day_text = day.isoformat() if isinstance(day, date) else str(day)
        url = self.base_url + self.day_path.format(entity_id=entity_id, date=day_text)
        headers: Dict[str, str] = {}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
            LOGGER.debug("Tracking request token=%s", mask_secret(self.api_token))
        LOGGER.info("Fetching fixes entity=%s day=%s", entity_id, day_text)
        body = request_json(
            self._session,
            "GET",
            url,
            context="Tracking fetch",
            error_cls=TrackingSourceError,
            headers=headers,
        )
        fixes = parse_fixes(body)
        LOGGER.info("Received %d fixes entity=%s day=%s", len(fixes), entity_id, day_text)
        return fixes


def parse_fixes(body: Any) -> List[Fix]:
    """Convert a raw tracking payload into :class:`Fix` records.

    Items lacking a two-element ``location.coordinates`` pair are skipped.
    Coordinates arrive as ``[longitude, latitude]``.
    """

    raw = body.get("data") if isinstance(body, dict) else None
    if not isinstance(raw, list):
        LOGGER.warning("Tracking payload has no data array; treating as empty")
        return []
    fixes: List[Fix] = []
    skipped = 0
    for element in raw:
        fix = _parse_fix(element)
        if fix is None:
            skipped += 1
            continue
        fixes.append(fix)
    if skipped:
        LOGGER.debug("Skipped %d malformed tracking items", skipped)
    return fixes


def _parse_fix(element: Any) -> Optional[Fix]:
    if not isinstance(element, dict):
        return None
    location = element.get("location")
    coords = location.get("coordinates") if isinstance(location, dict) else None
    if not isinstance(coords, (list, tuple)) or len(coords) != 2:
        return None
    try:
        lon = float(coords[0])
        lat = float(coords[1])
    except (TypeError, ValueError):
        return None
    return Fix(
        latitude=lat,
        longitude=lon,
        captured_at=parse_timestamp(element.get("location_captured_on_timestamp")),
        accuracy=_parse_accuracy(element.get("accuracy")),
    )


def _parse_accuracy(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string or epoch seconds/milliseconds into an aware datetime."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        seconds = value / 1000.0 if abs(value) > _EPOCH_MS_THRESHOLD else float(value)
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.lstrip("-").replace(".", "", 1).isdigit():
            return parse_timestamp(float(text))
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return None


__all__ = ["TrackingSourceClient", "parse_fixes", "parse_timestamp"]
