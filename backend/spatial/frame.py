from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

from geo.resolution import probe_length_for_zoom
from spatial.expand import fill_bbox
from spatial.rollup import rollup, rollup_all
from spatial.store import SpatialIndex
from spatial.types import CellVisitor, FrameResult, Viewport

logger = logging.getLogger(__name__)


def _draw_order(keys: set[str]) -> list[str]:
    # Finest buckets first; reversing the concatenation then puts coarse
    # (large) features at the front so they are drawn underneath.
    return sorted(keys, key=lambda k: (-len(k), k))


def _dedupe_by_identity(items: list[Any]) -> list[Any]:
    seen: set[int] = set()
    out: list[Any] = []
    for item in items:
        ident = id(item)
        if ident in seen:
            continue
        seen.add(ident)
        out.append(item)
    return out


@dataclass
class FrameQuery:
    """
    Per-frame visibility query over a `SpatialIndex`.

    Read-only with respect to the index; the working key set and draw list are
    built fresh on every call and returned in the `FrameResult`.
    """

    index: SpatialIndex

    def query_frame(
        self,
        viewport: Viewport,
        *,
        on_cell_visited: CellVisitor | None = None,
    ) -> FrameResult:
        settings = self.index.settings
        t0 = time.perf_counter()

        probe_length = probe_length_for_zoom(viewport.zoom_level, settings)
        seed_key = self.index.key_for(viewport.center_lat, viewport.center_lon, probe_length)

        expansion = fill_bbox(
            seed_key,
            viewport.bbox,
            max_cells=settings.max_cells,
            strict=settings.strict_limits,
            on_cell_visited=on_cell_visited,
        )
        t_expand = time.perf_counter()

        keys: set[str] = set(expansion.keys)
        rollup(seed_key, keys, settings.limit_bottom)
        rollup_all(keys, keys, settings.limit_bottom)

        draw_list: list[Any] = []
        for key in _draw_order(keys):
            draw_list.extend(self.index.lookup_exact(key))

        if settings.include_descendants:
            # Only the probe-level cells: their descendants cover every finer key.
            finer: list[Any] = []
            for key in sorted(expansion.keys):
                finer.extend(self.index.lookup_descendants(key, exclude=keys))
            draw_list = finer + draw_list

        draw_list.reverse()
        if settings.dedupe_draw_list:
            draw_list = _dedupe_by_identity(draw_list)
        t_end = time.perf_counter()

        stats = {
            "probeLength": probe_length,
            "seedKey": seed_key,
            "cellsVisited": len(expansion.visited),
            "cellKeys": len(expansion.keys),
            "keys": len(keys),
            "features": len(draw_list),
            "truncated": expansion.truncated,
            "timingsMs": {
                "expand": round((t_expand - t0) * 1000.0, 3),
                "total": round((t_end - t0) * 1000.0, 3),
            },
        }
        logger.debug(
            "frame zoom=%s probe=%d seed=%s keys=%d features=%d",
            viewport.zoom_level,
            probe_length,
            seed_key,
            len(keys),
            len(draw_list),
        )
        return FrameResult(
            draw_list=draw_list,
            keys=frozenset(keys),
            seed_key=seed_key,
            probe_length=probe_length,
            truncated=expansion.truncated,
            stats=stats,
        )


def query_frame(
    index: SpatialIndex,
    viewport: Viewport,
    *,
    on_cell_visited: CellVisitor | None = None,
) -> FrameResult:
    return FrameQuery(index).query_frame(viewport, on_cell_visited=on_cell_visited)
