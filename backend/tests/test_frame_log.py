from __future__ import annotations

from geo import geohash
from spatial.frame import query_frame
from spatial.store import SpatialIndex
from spatial.types import MapFeature, Viewport
from telemetry.frame_log import FrameLog


def _frame(index: SpatialIndex, key: str, zoom: float):
    cell = geohash.decode(key)
    return query_frame(index, Viewport.around(cell.expanded(cell.width, cell.height), zoom))


def test_frame_log_groups_by_seed_length(tmp_path):
    index = SpatialIndex()
    index.insert("9q8yy", MapFeature(id="a"))
    index.insert("9q8yy", MapFeature(id="b"))

    log = FrameLog(path=tmp_path / "frames.duckdb")
    log.record(_frame(index, "9q8yy", 0.1), 0.1)
    log.record(_frame(index, "9q8yy", 0.1), 0.1)
    log.record(_frame(index, "9q8", 0.003), 0.003)
    assert log.count() == 3

    rows = log.summary()
    assert [r["probeLength"] for r in rows] == [3, 5]
    fine = rows[1]
    assert fine["n"] == 2
    assert fine["avgFeatures"] == 2.0
    assert fine["avgCellKeys"] == 21.0
    assert fine["p95TotalMs"] >= 0.0
    log.close()


def test_truncated_frames_are_counted(tmp_path):
    from spatial.config import IndexSettings

    index = SpatialIndex(settings=IndexSettings(max_cells=3))
    log = FrameLog(path=tmp_path / "frames.duckdb")
    log.record(_frame(index, "9q8yy", 0.1), 0.1)
    assert log.summary()[0]["truncatedRate"] == 1.0
    log.close()


def test_reset_removes_the_file(tmp_path):
    path = tmp_path / "nested" / "frames.duckdb"
    log = FrameLog(path=path)
    log.record(_frame(SpatialIndex(), "9q8yy", 0.1), 0.1)
    assert path.exists()

    log.reset()
    assert not path.exists()
    # Reopens lazily.
    assert log.count() == 0
    log.close()
