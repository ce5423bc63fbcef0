from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BBox:
    """
    WGS84 bounding box in lon/lat degrees.

    Convention used throughout this repo:
    - minLon, minLat, maxLon, maxLat
    """

    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    def normalized(self) -> "BBox":
        min_lon = min(self.min_lon, self.max_lon)
        max_lon = max(self.min_lon, self.max_lon)
        min_lat = min(self.min_lat, self.max_lat)
        max_lat = max(self.min_lat, self.max_lat)
        return BBox(min_lon=min_lon, min_lat=min_lat, max_lon=max_lon, max_lat=max_lat)

    @property
    def width(self) -> float:
        return abs(self.max_lon - self.min_lon)

    @property
    def height(self) -> float:
        return abs(self.max_lat - self.min_lat)

    @property
    def center(self) -> tuple[float, float]:
        # (lat, lon), same order as the viewport center.
        b = self.normalized()
        return ((b.min_lat + b.max_lat) / 2.0, (b.min_lon + b.max_lon) / 2.0)

    def as_list(self) -> list[float]:
        b = self.normalized()
        return [b.min_lon, b.min_lat, b.max_lon, b.max_lat]

    def intersects(self, other: "BBox") -> bool:
        """
        Open-interval overlap: boxes that only share an edge do not intersect.
        """
        a = self.normalized()
        b = other.normalized()
        return (
            a.min_lon < b.max_lon
            and a.max_lon > b.min_lon
            and a.min_lat < b.max_lat
            and a.max_lat > b.min_lat
        )

    def contains_point(self, lat: float, lon: float) -> bool:
        b = self.normalized()
        return b.min_lat <= lat <= b.max_lat and b.min_lon <= lon <= b.max_lon

    def expanded(self, d_lon: float, d_lat: float) -> "BBox":
        b = self.normalized()
        return BBox(
            min_lon=b.min_lon - d_lon,
            min_lat=b.min_lat - d_lat,
            max_lon=b.max_lon + d_lon,
            max_lat=b.max_lat + d_lat,
        )
