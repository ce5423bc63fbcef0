from __future__ import annotations

from typing import Literal

import pygeohash

from geo.aoi import BBox
from spatial.errors import InvalidCoordinate, InvalidGeohashKey


Direction = Literal["top", "bottom", "left", "right"]

DIRECTIONS: tuple[Direction, ...] = ("top", "bottom", "left", "right")

BASE32 = "0123456789bcdefghjkmnpqrstuvwxyz"
_BASE32_SET = frozenset(BASE32)

MAX_LENGTH = 12


def validate_key(key: str) -> str:
    """
    Return `key` unchanged if it is a well-formed geohash, else raise `InvalidGeohashKey`.
    """
    if not isinstance(key, str) or not key:
        raise InvalidGeohashKey(f"Invalid geohash key: {key!r}")
    bad = [c for c in key if c not in _BASE32_SET]
    if bad:
        raise InvalidGeohashKey(
            f"Invalid geohash key {key!r}: unexpected characters {''.join(sorted(set(bad)))!r}"
        )
    return key


def validate_coordinate(lat: float, lon: float) -> tuple[float, float]:
    lat = float(lat)
    lon = float(lon)
    if not (-90.0 <= lat <= 90.0) or not (-180.0 <= lon <= 180.0):
        raise InvalidCoordinate(f"Coordinate out of range: lat={lat}, lon={lon}")
    return lat, lon


def encode(lat: float, lon: float, length: int) -> str:
    lat, lon = validate_coordinate(lat, lon)
    n = max(1, min(MAX_LENGTH, int(length)))
    return pygeohash.encode(lat, lon, precision=n)


def _decode_exactly(key: str) -> tuple[float, float, float, float]:
    lat, lon, lat_err, lon_err = pygeohash.decode_exactly(validate_key(key))
    return float(lat), float(lon), float(lat_err), float(lon_err)


def decode(key: str) -> BBox:
    """
    Cell bounds of `key` as a lon/lat bbox.
    """
    lat, lon, lat_err, lon_err = _decode_exactly(key)
    return BBox(
        min_lon=lon - lon_err,
        min_lat=lat - lat_err,
        max_lon=lon + lon_err,
        max_lat=lat + lat_err,
    )


def adjacent(key: str, direction: Direction) -> str:
    """
    Same-length neighbor of `key` sharing an edge in `direction`.

    Longitude wraps at the antimeridian. Latitude saturates at the poles: the
    "top" neighbor of a north-most cell is the cell itself (likewise "bottom" at
    the south pole).
    """
    lat, lon, lat_err, lon_err = _decode_exactly(key)
    if direction == "top":
        lat += 2.0 * lat_err
    elif direction == "bottom":
        lat -= 2.0 * lat_err
    elif direction == "right":
        lon += 2.0 * lon_err
    elif direction == "left":
        lon -= 2.0 * lon_err
    else:
        raise ValueError(f"Unknown direction: {direction!r}")

    if lat > 90.0 or lat < -90.0:
        return key
    lon = ((lon + 180.0) % 360.0) - 180.0
    return pygeohash.encode(lat, lon, precision=len(key))


def neighbors(key: str) -> list[str]:
    return [adjacent(key, d) for d in DIRECTIONS]


def truncate(key: str, length: int) -> str:
    """
    Ancestor prefix of `key`; keys are plain strings so this never mutates.
    """
    return key[: max(0, int(length))]
