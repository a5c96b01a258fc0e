"""Tests for zigzag removal and distance thinning."""

from __future__ import annotations

import pytest

from trackline.geometry.geo import distance
from trackline.geometry.simplify import heading_change, remove_zigzags, thin_points

from conftest import make_track

# A wandering trace with a few sharp reversals.
WANDERING = [
    (13.0000, 80.0000),
    (13.0010, 80.0000),
    (13.0002, 80.0001),
    (13.0020, 80.0005),
    (13.0030, 80.0020),
    (13.0031, 80.0010),
    (13.0045, 80.0012),
    (13.0050, 80.0030),
]


def test_reversal_is_removed() -> None:
    points = [(0.0, 0.0), (0.001, 0.0), (0.0, 0.0001)]
    assert remove_zigzags(points) == [(0.0, 0.0), (0.0, 0.0001)]


def test_straight_line_is_untouched() -> None:
    points = make_track(6)
    assert remove_zigzags(points) == points


def test_threshold_is_configurable() -> None:
    # Roughly a 45 degree turn at the middle point.
    points = [(0.0, 0.0), (0.001, 0.0), (0.002, 0.001)]
    assert heading_change(*points) == pytest.approx(45.0, abs=0.1)
    assert remove_zigzags(points, threshold_deg=60.0) == points
    assert remove_zigzags(points, threshold_deg=30.0) == [points[0], points[2]]


def test_heading_change_uses_shortest_angle() -> None:
    # North-west then north-east: raw bearings ~315 and ~45.
    points = [(0.0, 0.001), (0.001, 0.0), (0.002, 0.001)]
    assert heading_change(*points) == pytest.approx(90.0, abs=0.1)


@pytest.mark.parametrize("threshold", [0.0, 10.0, 60.0, 180.0, 360.0])
def test_endpoints_always_kept(threshold: float) -> None:
    result = remove_zigzags(WANDERING, threshold_deg=threshold)
    assert result[0] == WANDERING[0]
    assert result[-1] == WANDERING[-1]


def test_zero_threshold_keeps_only_endpoints() -> None:
    assert remove_zigzags(WANDERING, threshold_deg=0.0) == [WANDERING[0], WANDERING[-1]]


@pytest.mark.parametrize("count", [0, 1, 2])
def test_short_sequences_pass_through(count: int) -> None:
    points = WANDERING[:count]
    result = remove_zigzags(points)
    assert result == points
    assert result is not points


@pytest.mark.parametrize("min_distance", [0.0, 40.0, 150.0, 500.0])
def test_thinned_points_respect_minimum_spacing(min_distance: float) -> None:
    result = thin_points(WANDERING, min_distance)

    assert result[0] == WANDERING[0]
    for earlier, later in zip(result, result[1:]):
        assert distance(earlier, later) >= min_distance


def test_zero_spacing_keeps_everything() -> None:
    assert thin_points(WANDERING, 0.0) == WANDERING


def test_last_point_is_not_forced() -> None:
    # Consecutive fixes ~11 m apart: indices 0 and 4 survive, index 5 does not.
    points = make_track(6, step_deg=0.0001)
    result = thin_points(points, 40.0)
    assert result == [points[0], points[4]]


def test_thinning_measures_from_last_kept_point() -> None:
    points = make_track(9, step_deg=0.0001)
    result = thin_points(points, 40.0)
    assert result == [points[0], points[4], points[8]]


def test_thinning_short_inputs() -> None:
    assert thin_points([], 40.0) == []
    single = WANDERING[:1]
    assert thin_points(single, 40.0) == single
