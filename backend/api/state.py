from __future__ import annotations

import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from spatial.config import load_settings
from spatial.store import SpatialIndex
from telemetry.frame_log import FrameLog

_INDEX: SpatialIndex | None = None
# The index and the per-frame expansion are not safe under concurrent use;
# every request that touches them holds this lock.
_INDEX_LOCK = threading.RLock()

_FRAME_LOG: FrameLog | None = None
_FRAME_LOG_LOCK = threading.Lock()


@contextmanager
def locked_index() -> Iterator[SpatialIndex]:
    global _INDEX
    with _INDEX_LOCK:
        if _INDEX is None:
            _INDEX = SpatialIndex(settings=load_settings())
        yield _INDEX


def reset_index() -> None:
    """
    Drop the process-wide index; the next request rebuilds it from current settings.
    """
    global _INDEX
    with _INDEX_LOCK:
        _INDEX = None


def frame_log() -> FrameLog | None:
    """
    The frame log named by GEOINDEX_FRAME_LOG, or None when it is unset.
    """
    global _FRAME_LOG
    raw = (os.getenv("GEOINDEX_FRAME_LOG") or "").strip()
    with _FRAME_LOG_LOCK:
        if not raw:
            return None
        path = Path(raw)
        if _FRAME_LOG is not None and _FRAME_LOG.path.resolve() != path.resolve():
            _FRAME_LOG.close()
            _FRAME_LOG = None
        if _FRAME_LOG is None:
            _FRAME_LOG = FrameLog(path=path)
        return _FRAME_LOG


def reset_frame_log() -> None:
    global _FRAME_LOG
    with _FRAME_LOG_LOCK:
        if _FRAME_LOG is not None:
            _FRAME_LOG.reset()
            _FRAME_LOG = None
