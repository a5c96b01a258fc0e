"""Utilities for visualising a pipeline result on a map."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence, Union

import folium  # Using folium to build an interactive Leaflet map.

from .geometry.geo import PointLike, as_lat_lon
from .models import LatLon
from .services.pipeline import PipelineResult
from .utils import format_distance

PathLike = Union[str, Path]

_RAW_COLOR = "red"
_SNAPPED_COLOR = "orange"
_ROUTE_COLOR = "green"

# Used when a result has no points at all.
DEFAULT_CENTER: LatLon = (13.0827, 80.2707)


def _latlon_list(points: Sequence[PointLike]) -> List[LatLon]:
    return [as_lat_lon(point) for point in points]


def _map_center(result: PipelineResult) -> LatLon:
    for sequence in (result.refined_points, result.accepted_fixes, result.raw_fixes):
        if sequence:
            return as_lat_lon(sequence[0])
    return DEFAULT_CENTER


def create_route_map(
    result: PipelineResult,
    *,
    output_html_path: Optional[PathLike] = None,
) -> folium.Map:
    """Create an interactive map with raw, snapped and routed layers.

    Args:
        result: Output of :meth:`TrackingPipeline.run`.
        output_html_path: Optional path to persist the resulting map as an HTML file.

    Returns:
        A :class:`folium.Map` instance containing the overlay.
    """

    folium_map = folium.Map(location=_map_center(result), zoom_start=15, control_scale=True)

    layers = (
        (result.accepted_fixes, _RAW_COLOR, f"Raw points ({len(result.accepted_fixes)})"),
        (result.snapped_points, _SNAPPED_COLOR, f"Snapped ({len(result.snapped_points)})"),
        (result.route_points, _ROUTE_COLOR, f"Route ({len(result.route_points)})"),
    )
    for points, color, tooltip in layers:
        if len(points) < 2:
            continue
        folium.PolyLine(
            _latlon_list(points),
            color=color,
            weight=5,
            opacity=0.7,
            tooltip=tooltip,
        ).add_to(folium_map)

    if result.refined_points:
        start = as_lat_lon(result.refined_points[0])
        end = as_lat_lon(result.refined_points[-1])
        folium.Marker(location=start, popup="Start Point").add_to(folium_map)
        folium.Marker(
            location=end,
            popup=folium.Popup(
                html=f"End Point<br>Distance: {format_distance(result.display_distance_m)}",
                max_width=300,
            ),
        ).add_to(folium_map)

    if output_html_path is not None:
        output_path = Path(output_html_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        folium_map.save(str(output_path))

    return folium_map


__all__ = ["create_route_map"]
