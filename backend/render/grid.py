from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from geo import geohash
from geo.aoi import BBox


@dataclass
class GridCollector:
    """
    `on_cell_visited` hook that remembers visited cells, in visit order.

    Pure bookkeeping: it never touches index state.
    """

    cells: list[str] = field(default_factory=list)

    def __call__(self, key: str) -> None:
        self.cells.append(key)


def trace_viewport_bbox(bbox: BBox) -> dict[str, Any]:
    b = bbox.normalized()
    lons = [b.min_lon, b.max_lon, b.max_lon, b.min_lon, b.min_lon]
    lats = [b.min_lat, b.min_lat, b.max_lat, b.max_lat, b.min_lat]
    return {
        "type": "scattermapbox",
        "name": "Viewport bbox",
        "lon": lons,
        "lat": lats,
        "mode": "lines",
        "line": {"color": "rgba(55, 71, 79, 0.7)", "width": 1},
        "hoverinfo": "skip",
        "showlegend": False,
    }


def trace_geohash_grid(cells: list[str], *, name: str = "Geohash grid") -> dict[str, Any]:
    """
    Outline every cell as one closed ring; rings are separated by `None` gaps.
    """
    lons: list[float | None] = []
    lats: list[float | None] = []
    texts: list[str | None] = []
    for key in cells:
        b = geohash.decode(key)
        lons.extend([b.min_lon, b.max_lon, b.max_lon, b.min_lon, b.min_lon, None])
        lats.extend([b.min_lat, b.min_lat, b.max_lat, b.max_lat, b.min_lat, None])
        texts.extend([key, key, key, key, key, None])
    return {
        "type": "scattermapbox",
        "name": name,
        "lon": lons,
        "lat": lats,
        "text": texts,
        "mode": "lines",
        "line": {"color": "rgba(0, 0, 0, 0.5)", "width": 1},
        "hoverinfo": "text",
        "showlegend": False,
    }
