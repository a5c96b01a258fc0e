"""General utility helpers shared across modules."""

from __future__ import annotations

from dataclasses import fields, is_dataclass
import json
import math
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any


def format_distance(meters: float) -> str:
    """Format metres as a ``X.XX km`` string."""

    return f"{meters / 1000:.2f} km"


def _normalise_value(value: Any) -> Any:
    """Convert objects to JSON-friendly representations."""

    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: _normalise_value(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="ignore")
    if isinstance(value, set):
        return sorted(_normalise_value(item) for item in value)
    if isinstance(value, (list, tuple)):
        return [_normalise_value(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _normalise_value(val) for key, val in value.items()}
    return value


def to_jsonable(value: Any) -> Any:
    """Return ``value`` converted into plain JSON types."""

    return _normalise_value(value)


def json_dumps(value: Any, *, indent: int | None = None) -> str:
    """Serialise ``value`` (dataclasses, datetimes and enums included) as JSON."""

    return json.dumps(_normalise_value(value), indent=indent)
