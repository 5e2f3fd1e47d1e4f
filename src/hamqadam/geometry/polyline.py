"""
Encoded polyline codec (Google "Encoded Polyline Algorithm Format").

Each point is stored as a latitude delta followed by a longitude delta against the
previous point. A delta is scaled by 10**precision, zig-zag encoded, then split into
5-bit chunks (least significant first); every chunk except the last carries the 0x20
continuation bit, and each chunk is offset by 63 into printable ASCII.

Axis order: latitude first, on both the encoded side and the decoded side.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import ValidationError

from hamqadam.domain.models import Coordinate
from hamqadam.errors import DecodeError

_OFFSET = 63
_CHUNK_MASK = 0x1F
_CONTINUATION = 0x20
_MAX_GROUP = 0x3F


def _read_value(encoded: str, index: int) -> tuple[int, int]:
    """Read one zig-zag varint starting at `index`; return (delta, next_index)."""
    length = len(encoded)
    result = 0
    shift = 0
    while True:
        if index >= length:
            raise DecodeError("string ends inside a value", index)
        group = ord(encoded[index]) - _OFFSET
        if group < 0 or group > _MAX_GROUP:
            raise DecodeError(f"invalid character {encoded[index]!r}", index)
        index += 1
        result |= (group & _CHUNK_MASK) << shift
        shift += 5
        if not group & _CONTINUATION:
            break
    delta = ~(result >> 1) if result & 1 else result >> 1
    return delta, index


def decode(encoded: str, precision: int = 5) -> list[Coordinate]:
    """Decode `encoded` into an ordered list of coordinates (first point = route start)."""
    factor = 10**precision
    index = 0
    lat = 0
    lng = 0
    path: list[Coordinate] = []

    while index < len(encoded):
        point_start = index
        dlat, index = _read_value(encoded, index)
        if index >= len(encoded):
            raise DecodeError("latitude without a longitude", point_start)
        dlng, index = _read_value(encoded, index)
        lat += dlat
        lng += dlng
        try:
            path.append(Coordinate(lat=lat / factor, lng=lng / factor))
        except ValidationError as exc:
            raise DecodeError(f"point out of range ({lat / factor}, {lng / factor})", point_start) from exc

    return path


def _encode_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else value << 1
    chunks: list[str] = []
    while value >= _CONTINUATION:
        chunks.append(chr((_CONTINUATION | (value & _CHUNK_MASK)) + _OFFSET))
        value >>= 5
    chunks.append(chr(value + _OFFSET))
    return "".join(chunks)


def encode(coordinates: Iterable[Coordinate | tuple[float, float]], precision: int = 5) -> str:
    """Encode coordinates (or `(lat, lng)` pairs) with the same scheme `decode` reads."""
    factor = 10**precision
    prev_lat = 0
    prev_lng = 0
    out: list[str] = []
    for point in coordinates:
        lat, lng = point.as_pair() if isinstance(point, Coordinate) else point
        lat_i = round(lat * factor)
        lng_i = round(lng * factor)
        out.append(_encode_value(lat_i - prev_lat))
        out.append(_encode_value(lng_i - prev_lng))
        prev_lat, prev_lng = lat_i, lng_i
    return "".join(out)
