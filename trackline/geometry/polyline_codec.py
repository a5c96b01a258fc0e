"""Encoded polyline support for directions geometry.

Decoding is strict: a truncated continuation sequence or a character outside
the encoding alphabet raises :class:`PolylineDecodeError` at the offending
offset instead of producing a shortened or shifted coordinate list.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

import polyline

from ..errors import PolylineDecodeError
from ..models import LatLon

_CHAR_OFFSET = 63
_CHUNK_MASK = 0x1F
_CONTINUATION_BIT = 0x20

_GEOMETRY_PRECISION = {
    "polyline": 5,
    "polyline6": 6,
}


def precision_for_geometries(geometries: str) -> int:
    """Return the coordinate precision matching a directions ``geometries`` value."""

    try:
        return _GEOMETRY_PRECISION[geometries]
    except KeyError as exc:
        raise ValueError(f"Unsupported geometry encoding: {geometries!r}") from exc


def decode_polyline(encoded: str, precision: int = 5) -> List[LatLon]:
    """Decode an encoded polyline string into a list of (lat, lon) tuples."""

    if not encoded:
        return []
    factor = 10**precision
    length = len(encoded)
    index = 0
    lat = 0
    lon = 0
    coordinates: List[LatLon] = []
    while index < length:
        d_lat, index = _decode_value(encoded, index)
        if index >= length:
            raise PolylineDecodeError(
                f"Polyline ends after a latitude delta at offset {index}"
            )
        d_lon, index = _decode_value(encoded, index)
        lat += d_lat
        lon += d_lon
        coordinates.append((lat / factor, lon / factor))
    return coordinates


def encode_polyline(points: Iterable[Sequence[float]], precision: int = 5) -> str:
    """Encode (lat, lon) pairs with the ``polyline`` library."""

    coords = [(float(lat), float(lon)) for lat, lon in points]
    return polyline.encode(coords, precision=precision)


def _decode_value(encoded: str, index: int) -> Tuple[int, int]:
    """Read one zig-zag encoded integer starting at ``index``."""

    result = 0
    shift = 0
    while True:
        if index >= len(encoded):
            raise PolylineDecodeError(
                f"Truncated polyline: continuation sequence runs past offset {index - 1}"
            )
        char = encoded[index]
        chunk = ord(char) - _CHAR_OFFSET
        if chunk < 0 or chunk > 0x3F:
            raise PolylineDecodeError(
                f"Invalid polyline character {char!r} at offset {index}"
            )
        index += 1
        result |= (chunk & _CHUNK_MASK) << shift
        shift += 5
        if chunk < _CONTINUATION_BIT:
            break
    value = ~(result >> 1) if result & 1 else result >> 1
    return value, index


__all__ = ["decode_polyline", "encode_polyline", "precision_for_geometries"]
