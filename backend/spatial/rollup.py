from __future__ import annotations

from typing import Iterable

from geo.geohash import truncate


def rollup(key: str, key_set: set[str], limit_bottom: int) -> int:
    """
    Add `key` and its ancestor prefixes (down to length 1) to `key_set`.

    Stops climbing at the first prefix already present, since its own ancestors
    were added with it. Returns how many keys were added; a repeat call adds 0.
    """
    k = truncate(key, limit_bottom)
    if not k:
        return 0

    added = 0
    if k not in key_set:
        key_set.add(k)
        added += 1

    while len(k) > 1:
        k = truncate(k, len(k) - 1)
        if k in key_set:
            break
        key_set.add(k)
        added += 1
    return added


def rollup_all(keys: Iterable[str], key_set: set[str], limit_bottom: int) -> int:
    # Snapshot first: `keys` is usually `key_set` itself.
    return sum(rollup(k, key_set, limit_bottom) for k in list(keys))
