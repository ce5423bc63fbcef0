from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from geo import geohash
from geo.projection import Projection
from geo.resolution import key_length_for_extent
from spatial.config import IndexSettings
from spatial.types import ScreenFeature

logger = logging.getLogger(__name__)


@dataclass
class SpatialIndex:
    """
    Geohash key -> features registered under that key.

    Notes:
    - Buckets keep insertion order; inserting the same feature twice stores it twice.
    - A feature lives under the key it was inserted with; moving it does not re-index.
    - Lookups never fail on a missing key; they return an empty list.
    """

    settings: IndexSettings = field(default_factory=IndexSettings)

    _buckets: dict[str, list[Any]] = field(default_factory=dict, repr=False)
    # Sorted bucket keys, for prefix (descendant) scans.
    _sorted_keys: list[str] = field(default_factory=list, repr=False)

    def __len__(self) -> int:
        return sum(len(b) for b in self._buckets.values())

    def keys(self) -> list[str]:
        return list(self._sorted_keys)

    def key_for(self, lat: float, lon: float, length: int | None = None) -> str:
        """
        Geohash for a point; length defaults to `default_length` and is clamped
        to `[1, limit_bottom]`.
        """
        n = self.settings.default_length if length is None else int(length)
        n = max(1, min(self.settings.limit_bottom, n))
        return geohash.encode(lat, lon, n)

    def _bounded(self, key: str) -> str:
        return geohash.truncate(geohash.validate_key(key), self.settings.limit_bottom)

    def insert(self, key: str, feature: Any) -> None:
        key = self._bounded(key)
        bucket = self._buckets.get(key)
        if bucket is None:
            bucket = []
            self._buckets[key] = bucket
            bisect.insort(self._sorted_keys, key)
        bucket.append(feature)

    def put(self, lat: float, lon: float, feature: Any, length: int | None = None) -> str:
        key = self.key_for(lat, lon, length)
        self.insert(key, feature)
        return key

    def put_object(self, feature: ScreenFeature, projection: Projection) -> str:
        """
        Index a feature by its screen center, picking the key length from its
        angular size so that it fits inside a single cell.
        """
        x = float(feature.x)
        y = float(feature.y)
        half_w = abs(float(feature.width)) / 2.0
        half_h = abs(float(feature.height)) / 2.0

        lat = projection.screen_to_lat(y)
        lon = projection.screen_to_lon(x)
        lat_extent = abs(projection.screen_to_lat(y - half_h) - projection.screen_to_lat(y + half_h))
        lon_extent = abs(projection.screen_to_lon(x + half_w) - projection.screen_to_lon(x - half_w))

        return self.put(lat, lon, feature, key_length_for_extent(lat_extent, lon_extent))

    def lookup_exact(self, key: str) -> list[Any]:
        return list(self._buckets.get(self._bounded(key)) or [])

    def lookup_at(self, lat: float, lon: float, length: int | None = None) -> list[Any]:
        return self.lookup_exact(self.key_for(lat, lon, length))

    def lookup_with_ancestors(self, key: str) -> list[Any]:
        """
        Features under `key` and every enclosing (shorter) key, finer to coarser.
        """
        k = self._bounded(key)
        out: list[Any] = []
        while k:
            bucket = self._buckets.get(k)
            if bucket:
                out.extend(bucket)
            k = geohash.truncate(k, len(k) - 1)
        return out

    def lookup_neighbors(self, key: str) -> list[Any]:
        out: list[Any] = []
        for n_key in geohash.neighbors(self._bounded(key)):
            out.extend(self._buckets.get(n_key) or [])
        return out

    def lookup_descendants(self, key: str, *, exclude: set[str] | frozenset[str] = frozenset()) -> list[Any]:
        """
        Features under keys that strictly extend `key` (finer cells inside it).
        """
        geohash.validate_key(key)
        out: list[Any] = []
        i = bisect.bisect_right(self._sorted_keys, key)
        while i < len(self._sorted_keys):
            k = self._sorted_keys[i]
            if not k.startswith(key):
                break
            if k not in exclude:
                out.extend(self._buckets[k])
            i += 1
        return out

    def sort_buckets(self, key: Callable[[Any], Any], *, reverse: bool = False) -> None:
        for bucket in self._buckets.values():
            bucket.sort(key=key, reverse=reverse)

    def clear(self) -> None:
        self._buckets.clear()
        self._sorted_keys.clear()

    def stats(self) -> dict[str, Any]:
        by_length: dict[int, int] = {}
        for k in self._sorted_keys:
            by_length[len(k)] = by_length.get(len(k), 0) + 1
        out = {
            "buckets": len(self._buckets),
            "features": len(self),
            "keysByLength": {str(n): by_length[n] for n in sorted(by_length)},
            "largestBucket": max((len(b) for b in self._buckets.values()), default=0),
        }
        logger.debug("index stats: %s", out)
        return out
