"""Tests for the trajectory source, snap and directions HTTP clients."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest
import requests

from trackline.clients.directions import DirectionsClient, format_waypoints, parse_route
from trackline.clients.response_handling import extract_error, mask_secret
from trackline.clients.snap import SnapClient
from trackline.clients.tracking import TrackingSourceClient, parse_fixes, parse_timestamp
from trackline.errors import (
    DirectionsServiceError,
    SnapServiceError,
    TrackingSourceError,
)

from conftest import FakeResp, FakeSession, make_fix, make_track, tracking_item


# --- Trajectory source ------------------------------------------------
def test_parse_fixes_skips_malformed_items() -> None:
    body = {
        "data": [
            tracking_item(13.0827, 80.2707, accuracy=5),
            {"location": {"coordinates": [80.0]}},
            {"location": {"coordinates": [80.0, 13.0, 5.0]}},
            {"accuracy": 3},
            "garbage",
            tracking_item(13.0830, 80.2710, accuracy=None),
        ]
    }

    fixes = parse_fixes(body)

    assert [f.lat_lon for f in fixes] == [(13.0827, 80.2707), (13.0830, 80.2710)]
    assert fixes[0].accuracy == 5.0
    assert fixes[1].accuracy is None
    assert fixes[0].captured_at == datetime(2025, 10, 16, 8, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("body", [None, [], {"data": None}, {"data": {"x": 1}}, "oops"])
def test_parse_fixes_without_data_array_is_empty(body) -> None:
    assert parse_fixes(body) == []


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2025-10-16T00:00:00Z", datetime(2025, 10, 16, tzinfo=timezone.utc)),
        ("2025-10-16T05:30:00+05:30", datetime(2025, 10, 16, tzinfo=timezone.utc)),
        (1760572800, datetime(2025, 10, 16, tzinfo=timezone.utc)),
        (1760572800000, datetime(2025, 10, 16, tzinfo=timezone.utc)),
        ("1760572800000", datetime(2025, 10, 16, tzinfo=timezone.utc)),
        ("not a time", None),
        (None, None),
        (True, None),
    ],
)
def test_parse_timestamp(value, expected) -> None:
    assert parse_timestamp(value) == expected


def test_fetch_day_builds_url_and_auth_header() -> None:
    session = FakeSession(FakeResp(200, {"data": [tracking_item(13.0, 80.0)]}))
    client = TrackingSourceClient(
        "https://tracking.example/",
        day_path="/days/{entity_id}/{date}",
        api_token="secret-token",
        session=session,
    )

    fixes = client.fetch_day("entity-1", date(2025, 10, 16))

    assert len(fixes) == 1
    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://tracking.example/days/entity-1/2025-10-16"
    assert call["headers"] == {"Authorization": "Bearer secret-token"}


def test_fetch_day_requires_base_url() -> None:
    client = TrackingSourceClient("", session=FakeSession())
    with pytest.raises(TrackingSourceError):
        client.fetch_day("entity-1", "2025-10-16")


def test_fetch_day_http_error_includes_detail() -> None:
    session = FakeSession(FakeResp(500, {"message": "database unavailable"}))
    client = TrackingSourceClient("https://tracking.example", api_token="", session=session)

    with pytest.raises(TrackingSourceError) as excinfo:
        client.fetch_day("entity-1", "2025-10-16")

    assert "status 500" in str(excinfo.value)
    assert "database unavailable" in str(excinfo.value)


def test_fetch_day_transport_error() -> None:
    session = FakeSession(requests.exceptions.ConnectionError("refused"))
    client = TrackingSourceClient("https://tracking.example", api_token="", session=session)
    with pytest.raises(TrackingSourceError):
        client.fetch_day("entity-1", "2025-10-16")


def test_fetch_day_invalid_json() -> None:
    session = FakeSession(FakeResp(200, ValueError("no json"), text="<html>"))
    client = TrackingSourceClient("https://tracking.example", api_token="", session=session)
    with pytest.raises(TrackingSourceError):
        client.fetch_day("entity-1", "2025-10-16")


# --- Snap -----------------------------------------------------------------
def test_snap_posts_lon_lat_pairs_and_parses_nulls() -> None:
    fixes = [make_fix(13.0827, 80.2707), make_fix(13.0830, 80.2710), make_fix(13.0835, 80.2715)]
    session = FakeSession(
        FakeResp(
            200,
            {
                "locations": [
                    {"location": [80.27071, 13.08271], "snapped_distance": 1.2},
                    None,
                    {"location": [80.27152, 13.08349]},
                ]
            },
        )
    )
    client = SnapClient("https://ors.example", profile="driving-car", radius_m=50, api_key="", session=session)

    matches = client.snap(fixes)

    assert matches == [(13.08271, 80.27071), None, (13.08349, 80.27152)]
    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "https://ors.example/v2/snap/driving-car"
    assert call["json"] == {
        "locations": [[80.2707, 13.0827], [80.2710, 13.0830], [80.2715, 13.0835]],
        "radius": 50,
    }
    assert "Authorization" not in call["headers"]


def test_snap_sends_api_key() -> None:
    session = FakeSession(FakeResp(200, {"locations": [None]}))
    client = SnapClient("https://ors.example", api_key="ors-key", session=session)
    client.snap([make_fix(13.0, 80.0)])
    assert session.calls[0]["headers"]["Authorization"] == "ors-key"


def test_snap_empty_input_makes_no_request() -> None:
    session = FakeSession()
    assert SnapClient("https://ors.example", session=session).snap([]) == []
    assert session.calls == []


@pytest.mark.parametrize(
    "body",
    [{"locations": [None]}, {"metadata": {}}, {"locations": "nope"}, ["not", "a", "dict"]],
)
def test_snap_rejects_unusable_payloads(body) -> None:
    session = FakeSession(FakeResp(200, body))
    client = SnapClient("https://ors.example", api_key="", session=session)
    with pytest.raises(SnapServiceError):
        client.snap([make_fix(13.0, 80.0), make_fix(13.1, 80.1)])


def test_snap_reports_ors_error_body() -> None:
    session = FakeSession(
        FakeResp(400, {"error": {"code": 2003, "message": "Parameter 'radius' is incorrect"}})
    )
    client = SnapClient("https://ors.example", api_key="", session=session)
    with pytest.raises(SnapServiceError) as excinfo:
        client.snap([make_fix(13.0, 80.0)])
    assert "radius" in str(excinfo.value)


# --- Directions -----------------------------------------------------------
def _directions_client(session, **kwargs):
    params = {
        "profile": "walking",
        "access_token": "pk.test-token",
        "geometries": "polyline",
        "overview": "full",
        "max_waypoints": 25,
        "session": session,
    }
    params.update(kwargs)
    return DirectionsClient("https://directions.example", **params)


def test_format_waypoints_uses_lon_lat_order() -> None:
    waypoints = [make_fix(13.0827, 80.2707), (13.083, 80.271)]
    assert format_waypoints(waypoints) == "80.2707,13.0827;80.271,13.083"


def test_route_request_and_parse() -> None:
    session = FakeSession(
        FakeResp(
            200,
            {
                "code": "Ok",
                "routes": [{"distance": 1234.5, "duration": 900.0, "geometry": "_p~iF~ps|U"}],
            },
        )
    )
    client = _directions_client(session)

    route = client.route(make_track(3))

    assert route is not None
    assert route.distance_m == 1234.5
    assert route.duration_s == 900.0
    assert route.geometry == "_p~iF~ps|U"
    call = session.calls[0]
    assert call["url"].startswith("https://directions.example/directions/v5/mapbox/walking/80.2707,13.0827;")
    assert call["params"] == {
        "access_token": "pk.test-token",
        "geometries": "polyline",
        "overview": "full",
    }


def test_route_requires_access_token() -> None:
    session = FakeSession()
    client = _directions_client(session, access_token="")
    with pytest.raises(DirectionsServiceError):
        client.route(make_track(2))
    assert session.calls == []


@pytest.mark.parametrize("count", [1, 26])
def test_route_rejects_bad_waypoint_counts(count: int) -> None:
    session = FakeSession()
    with pytest.raises(DirectionsServiceError):
        _directions_client(session).route(make_track(count))
    assert session.calls == []


def test_route_http_error() -> None:
    session = FakeSession(FakeResp(422, {"message": "Too many coordinates", "code": "InvalidInput"}))
    with pytest.raises(DirectionsServiceError) as excinfo:
        _directions_client(session).route(make_track(2))
    assert "InvalidInput" in str(excinfo.value)


def test_parse_route_without_routes_is_none() -> None:
    assert parse_route({"code": "NoRoute", "routes": []}) is None
    assert parse_route({"code": "NoRoute"}) is None


@pytest.mark.parametrize(
    "body",
    [
        "text",
        {"routes": [{"distance": 10.0}]},
        {"routes": [{"geometry": "abc"}]},
        {"routes": [{"distance": "far", "geometry": "abc"}]},
        {"routes": ["nope"]},
    ],
)
def test_parse_route_rejects_malformed_bodies(body) -> None:
    with pytest.raises(DirectionsServiceError):
        parse_route(body)


# --- Response helpers -----------------------------------------------------
def test_extract_error_falls_back_to_text() -> None:
    resp = FakeResp(502, ValueError("no json"), text="Bad Gateway")
    assert extract_error(resp) == "Bad Gateway"


def test_mask_secret() -> None:
    assert mask_secret("pk.abcdef1234") == "****1234"
    assert mask_secret("") == ""
    assert mask_secret(None) == ""


def test_extract_error_trims_long_text_bodies() -> None:
    resp = FakeResp(503, ValueError("no json"), text="  " + "x" * 500 + "\n")
    detail = extract_error(resp)
    assert len(detail) == 300
    assert detail.endswith("...")


def test_extract_error_ignores_blank_and_non_object_bodies() -> None:
    assert extract_error(FakeResp(500, ValueError("no json"), text="   ")) is None
    assert extract_error(FakeResp(500, ["unexpected"])) is None
    assert extract_error(None) is None


def test_parse_route_keeps_only_distance_geometry_and_duration() -> None:
    route = parse_route(
        {"code": "Ok", "routes": [{"distance": 12, "geometry": "??", "weight_name": "pedestrian"}]}
    )
    assert route.distance_m == 12.0
    assert route.duration_s is None
    assert not hasattr(route, "metadata")
