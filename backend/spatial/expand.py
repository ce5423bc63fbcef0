from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass

from geo import geohash
from geo.aoi import BBox
from spatial.errors import ExpansionLimitExceeded
from spatial.types import CellVisitor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Expansion:
    """
    Result of walking the geohash grid over a viewport at one key length.

    - keys: the seed, every cell overlapping the viewport reached from it, and
      the ring of their neighbors just outside the viewport
    - visited: every cell discovered (differs from `keys` only when truncated)
    - truncated: the walk stopped at `max_cells`
    """

    keys: frozenset[str]
    visited: frozenset[str]
    truncated: bool = False


def fill_bbox(
    seed_key: str,
    bbox: BBox,
    *,
    max_cells: int,
    strict: bool = False,
    on_cell_visited: CellVisitor | None = None,
) -> Expansion:
    """
    Flood-fill same-length cells outward from `seed_key`.

    Every newly discovered neighbor becomes a working key; the walk only
    continues from neighbors whose cell still overlaps `bbox`. Membership is
    checked before enqueueing, so each cell is processed at most once and the
    walk ends one ring past the viewport. The seed is always included and
    always expanded.
    """
    geohash.validate_key(seed_key)
    view = bbox.normalized()

    keys: set[str] = {seed_key}
    seen: set[str] = {seed_key}
    queue: deque[str] = deque([seed_key])
    truncated = False
    if on_cell_visited is not None:
        on_cell_visited(seed_key)

    while queue and not truncated:
        key = queue.popleft()
        for direction in geohash.DIRECTIONS:
            n_key = geohash.adjacent(key, direction)
            if n_key in seen:
                continue
            seen.add(n_key)
            if on_cell_visited is not None:
                on_cell_visited(n_key)

            if len(keys) >= max_cells:
                if strict:
                    raise ExpansionLimitExceeded(
                        max_cells=max_cells, seed_key=seed_key, probe_length=len(seed_key)
                    )
                truncated = True
                break
            keys.add(n_key)

            if geohash.decode(n_key).intersects(view):
                queue.append(n_key)

    if truncated:
        logger.warning(
            "viewport expansion from %s capped at %d cells (bbox=%s)",
            seed_key,
            max_cells,
            view.as_list(),
        )
    return Expansion(keys=frozenset(keys), visited=frozenset(seen), truncated=truncated)
