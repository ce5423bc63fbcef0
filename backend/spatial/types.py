from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

from geo.aoi import BBox


# Invoked once per newly discovered cell during viewport expansion.
CellVisitor = Callable[[str], None]


class ScreenFeature(Protocol):
    """
    What the index needs from a feature: its screen-space center and extent.
    """

    x: float
    y: float
    width: float
    height: float


@dataclass(eq=False)
class MapFeature:
    """
    A renderable map feature. Compared by identity: the index stores references.
    """

    id: str
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    props: dict[str, Any] = field(default_factory=dict)

    @property
    def area(self) -> float:
        return abs(self.width * self.height)


@dataclass(frozen=True)
class Viewport:
    """
    Map state for one frame: reference point, visible bbox and zoom scale (> 0).
    """

    center_lat: float
    center_lon: float
    bbox: BBox
    zoom_level: float

    @property
    def center(self) -> tuple[float, float]:
        return (self.center_lat, self.center_lon)

    @classmethod
    def around(cls, bbox: BBox, zoom_level: float) -> "Viewport":
        lat, lon = bbox.center
        return cls(center_lat=lat, center_lon=lon, bbox=bbox.normalized(), zoom_level=zoom_level)


@dataclass(frozen=True)
class FrameResult:
    """
    Everything one frame query produced. Nothing here is kept by the index.
    """

    draw_list: list[Any]
    keys: frozenset[str]
    seed_key: str
    probe_length: int
    truncated: bool = False
    stats: dict[str, Any] = field(default_factory=dict)
