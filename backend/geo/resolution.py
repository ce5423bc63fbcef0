from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from spatial.config import IndexSettings


# (upper bound in degrees, key length), finest first. A cell of that length is
# at least as wide/tall as any extent strictly below the bound.
_LON_THRESHOLDS: tuple[tuple[float, int], ...] = (
    (0.0000003357, 12),
    (0.000001341, 11),
    (0.00001072, 10),
    (0.00004291, 9),
    (0.0003433, 8),
    (0.001373, 7),
    (0.01098, 6),
    (0.04394, 5),
    (0.3515, 4),
    (1.406, 3),
    (11.25, 2),
    (45.0, 1),
)

_LAT_THRESHOLDS: tuple[tuple[float, int], ...] = (
    (0.0000001676, 12),
    (0.000001341, 11),
    (0.000005364, 10),
    (0.00004291, 9),
    (0.0001716, 8),
    (0.001373, 7),
    (0.005493, 6),
    (0.04394, 5),
    (0.1757, 4),
    (1.40625, 3),
    (5.625, 2),
    (45.0, 1),
)


def _lookup(extent: float, table: tuple[tuple[float, int], ...]) -> int:
    e = abs(float(extent))
    for bound, length in table:
        if e < bound:
            return length
    # Whole-planet cell.
    return 0


def key_length_for_extent(lat: float, lon: float) -> int:
    """
    Coarsest-fitting geohash length for a feature spanning `lat` degrees of
    latitude and `lon` degrees of longitude.

    Returns 0..12; callers clamp to their own `limit_bottom`.
    """
    return min(_lookup(lat, _LAT_THRESHOLDS), _lookup(lon, _LON_THRESHOLDS))


def probe_length_for_zoom(zoom_level: float, settings: "IndexSettings") -> int:
    """
    Key length used to walk the viewport for one frame.

    The probe is a fixed angular extent shrunk by zoom, so zooming in yields finer
    cells.
    """
    z = float(zoom_level)
    if z <= 0:
        raise ValueError(f"zoom_level must be positive, got {zoom_level}")
    extent = settings.probe_extent / z
    length = key_length_for_extent(extent, extent)
    return max(1, min(settings.limit_bottom, length))
