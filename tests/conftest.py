"""Global pytest fixtures & helpers.

Adds project root to path and provides reusable fakes for the HTTP clients
and the routing services so pipeline tests stay offline.
"""
from __future__ import annotations

import json
import os
import sys
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from trackline.geometry.polyline_codec import encode_polyline
from trackline.models import DirectionsRoute, Fix


class FakeResp:
    """Minimal fake response matching needed parts of requests.Response."""

    def __init__(self, status_code=200, data=None, text=None):
        self.status_code = status_code
        self._data = data
        self._text = text
        self.url = "https://example.test"

    def json(self):
        if isinstance(self._data, Exception):
            raise self._data
        return self._data

    @property
    def text(self):
        if self._text is not None:
            return self._text
        try:
            return json.dumps(self._data)
        except Exception:
            return str(self._data)


class FakeSession:
    """Records requests and replays queued responses (or raises queued errors)."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class FakeSnapClient:
    def __init__(self, matches=None, error: Optional[Exception] = None):
        self.matches = matches
        self.error = error
        self.calls: List[List[Fix]] = []

    def snap(self, points):
        self.calls.append(list(points))
        if self.error is not None:
            raise self.error
        if self.matches is None:
            return [point.lat_lon for point in points]
        return list(self.matches)


class FakeDirectionsClient:
    """Returns a straight-line route through each chunk unless told otherwise."""

    geometries = "polyline"
    max_waypoints = 25

    def __init__(self, outcomes=None, distance_m: float = 100.0):
        self.outcomes = list(outcomes or [])
        self.distance_m = distance_m
        self.calls: List[List[Fix]] = []

    def route(self, waypoints):
        self.calls.append(list(waypoints))
        if self.outcomes:
            outcome = self.outcomes.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            if outcome != "default":
                return outcome
        geometry = encode_polyline([point.lat_lon for point in waypoints])
        return DirectionsRoute(distance_m=self.distance_m, geometry=geometry)


# --- Factory helpers -------------------------------------------------
T0 = datetime(2025, 10, 16, 8, 0, tzinfo=timezone.utc)


def make_fix(lat, lon, accuracy=None, seconds=0):
    return Fix(
        latitude=lat,
        longitude=lon,
        captured_at=T0 + timedelta(seconds=seconds),
        accuracy=accuracy,
    )


def make_track(count, *, lat=13.0827, lon=80.2707, step_deg=0.001, accuracy=5.0):
    """Return ``count`` fixes heading due north, ``step_deg`` apart (~111 m per 0.001)."""

    return [
        make_fix(lat + index * step_deg, lon, accuracy=accuracy, seconds=index * 30)
        for index in range(count)
    ]


def tracking_item(lat, lon, accuracy=None, timestamp="2025-10-16T08:00:00Z"):
    return {
        "location": {"type": "Point", "coordinates": [lon, lat]},
        "accuracy": accuracy,
        "location_captured_on_timestamp": timestamp,
    }


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def fixed_clock():
    stamp = datetime(2025, 10, 16, 20, 0, tzinfo=timezone.utc)
    return lambda: stamp


@pytest.fixture
def north_track():
    return make_track(8)
