"""Shared HTTP response helpers for external service interactions."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Type

import requests

from ..config import REQUEST_TIMEOUT
from ..errors import ServiceError

RequestsJSONDecodeError: Type[Exception]
if hasattr(requests.exceptions, "JSONDecodeError"):
    RequestsJSONDecodeError = requests.exceptions.JSONDecodeError
else:  # pragma: no cover - fallback for old requests versions
    RequestsJSONDecodeError = ValueError

LOGGER = logging.getLogger(__name__)

__all__ = [
    "extract_error",
    "mask_secret",
    "request_json",
]


def request_json(
    session: requests.Session,
    method: str,
    url: str,
    *,
    context: str,
    error_cls: Type[ServiceError] = ServiceError,
    timeout: float = REQUEST_TIMEOUT,
    **kwargs: Any,
) -> Any:
    """Issue one request and return the decoded JSON body.

    Transport failures, non-2xx statuses and undecodable bodies are all raised
    as ``error_cls`` so callers only handle the service taxonomy.
    """

    try:
        response = session.request(method, url, timeout=timeout, **kwargs)
    except requests.exceptions.RequestException as exc:
        LOGGER.error("%s transport error: %s", context, exc)
        raise error_cls(f"{context} transport failure") from exc

    status = response.status_code
    LOGGER.debug("%s status=%s", context, status)
    if status >= 400:
        detail = extract_error(response)
        message = f"{context} request failed (status {status})"
        if detail:
            message = f"{message} | {detail}"
        LOGGER.error(message)
        raise error_cls(message)

    try:
        return response.json()
    except (ValueError, RequestsJSONDecodeError) as exc:
        LOGGER.error("%s returned invalid JSON: %s", context, exc)
        raise error_cls(f"{context} returned invalid JSON") from exc


def extract_error(
    resp: Optional[requests.Response], max_chars: int = 300
) -> Optional[str]:
    """Return the service's error detail for a failed response.

    JSON bodies contribute their message and code fields. Non-JSON bodies
    (proxy error pages, plain text) are returned stripped and cut to
    ``max_chars``.
    """

    if resp is None:
        return None
    try:
        data = resp.json()
    except (ValueError, RequestsJSONDecodeError):
        text = getattr(resp, "text", None)
        if not isinstance(text, str) or not text.strip():
            return None
        body = text.strip()
        return body if len(body) <= max_chars else body[: max_chars - 3] + "..."
    if not isinstance(data, dict):
        return None
    parts = _collect_error_parts(data)
    return " | ".join(parts) if parts else None


def mask_secret(value: str | None, visible: int = 4) -> str:
    """Return ``****`` followed by the last ``visible`` characters of ``value``."""

    if not value:
        return ""
    return f"****{value[-visible:]}"


def _collect_error_parts(data: Dict[str, Any]) -> List[str]:
    """Build error snippets from Mapbox-style and openrouteservice-style bodies."""

    parts: List[str] = []
    message = data.get("message")
    if message:
        parts.append(str(message))
    code = data.get("code")
    if code:
        parts.append(str(code))
    nested = data.get("error")
    if isinstance(nested, dict):
        nested_message = nested.get("message")
        nested_code = nested.get("code")
        if nested_message:
            parts.append(str(nested_message))
        if nested_code is not None:
            parts.append(f"code:{nested_code}")
    elif isinstance(nested, str) and nested:
        parts.append(nested)
    return parts
