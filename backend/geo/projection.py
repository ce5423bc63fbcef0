from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Protocol

from pyproj import Transformer


class Projection(Protocol):
    """
    Screen-space <-> lon/lat conversion used by the insertion path.
    """

    def screen_to_lat(self, y: float) -> float: ...

    def screen_to_lon(self, x: float) -> float: ...


@lru_cache(maxsize=1)
def transformer_4326_to_3857() -> Transformer:
    return Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True)


@lru_cache(maxsize=1)
def transformer_3857_to_4326() -> Transformer:
    return Transformer.from_crs("EPSG:3857", "EPSG:4326", always_xy=True)


_MAX_MERCATOR_LAT = 85.05112878


@dataclass(frozen=True)
class WebMercatorProjection:
    """
    Screen space = Web Mercator (EPSG:3857) meters * `scale`, y growing downwards.

    Latitudes beyond the Mercator limit are clamped before projecting.
    """

    scale: float = 1.0

    def screen_to_lon(self, x: float) -> float:
        lon, _lat = transformer_3857_to_4326().transform(float(x) / self.scale, 0.0)
        return float(lon)

    def screen_to_lat(self, y: float) -> float:
        _lon, lat = transformer_3857_to_4326().transform(0.0, -float(y) / self.scale)
        return float(lat)

    def lon_to_screen(self, lon: float) -> float:
        x, _y = transformer_4326_to_3857().transform(float(lon), 0.0)
        return float(x) * self.scale

    def lat_to_screen(self, lat: float) -> float:
        lat = max(-_MAX_MERCATOR_LAT, min(_MAX_MERCATOR_LAT, float(lat)))
        _x, y = transformer_4326_to_3857().transform(0.0, lat)
        return -float(y) * self.scale
