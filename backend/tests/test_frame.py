from __future__ import annotations

import pytest

from geo import geohash
from render.grid import GridCollector
from spatial.config import IndexSettings
from spatial.frame import FrameQuery, query_frame
from spatial.store import SpatialIndex
from spatial.types import MapFeature, Viewport


def _view_over(key: str, *, zoom: float, margin_cells: float = 1.0) -> Viewport:
    cell = geohash.decode(key)
    bbox = cell.expanded(cell.width * margin_cells, cell.height * margin_cells)
    return Viewport.around(bbox, zoom)


def test_neighboring_features_are_both_drawn():
    index = SpatialIndex()
    f1 = MapFeature(id="f1")
    f2 = MapFeature(id="f2")
    index.insert("9q8yy", f1)
    index.insert("9q8yz", f2)

    # zoom 0.1 -> probe length 5
    result = FrameQuery(index).query_frame(_view_over("9q8yy", zoom=0.1))

    assert result.probe_length == 5
    assert result.seed_key == "9q8yy"
    assert {"9q8yy", "9q8yz"} <= result.keys
    assert {"9q8y", "9q8", "9q", "9"} <= result.keys
    assert f1 in result.draw_list
    assert f2 in result.draw_list
    assert result.stats["cellKeys"] == 21


def test_coarse_features_found_at_finer_probe_and_drawn_first():
    index = SpatialIndex()
    fine = MapFeature(id="fine")
    coarse = MapFeature(id="coarse")
    index.insert("9q8yy", fine)
    index.insert("9", coarse)

    result = query_frame(index, _view_over("9q8yy", zoom=0.1))
    assert result.draw_list == [coarse, fine]


def test_finer_feature_needs_descendant_lookup_at_coarse_probe():
    f1 = MapFeature(id="f1")
    region = MapFeature(id="region")
    # zoom 0.003 -> probe extent 0.5 deg -> length 3; the view is exactly cell "9q8".
    view = Viewport.around(geohash.decode("9q8"), 0.003)

    index = SpatialIndex()
    index.insert("9q8yy", f1)
    index.insert("9q", region)
    assert f1 in index.lookup_with_ancestors("9q8yy")

    lod = FrameQuery(index).query_frame(view)
    assert lod.probe_length == 3
    assert lod.seed_key == "9q8"
    assert {"9q8", "9q", "9"} <= lod.keys
    assert "9q8yy" not in lod.keys
    assert lod.draw_list == [region]

    deep_index = SpatialIndex(settings=IndexSettings(include_descendants=True))
    deep_index.insert("9q8yy", f1)
    deep_index.insert("9q", region)
    deep = FrameQuery(deep_index).query_frame(view)
    assert deep.draw_list == [region, f1]


def test_features_outside_viewport_are_not_drawn():
    index = SpatialIndex()
    index.insert("u4pru", MapFeature(id="far"))
    result = query_frame(index, _view_over("9q8yy", zoom=0.1))
    assert result.draw_list == []


def test_duplicates_kept_by_default_and_optionally_dropped():
    f = MapFeature(id="f")

    index = SpatialIndex()
    index.insert("9q8yy", f)
    index.insert("9q8yy", f)
    assert query_frame(index, _view_over("9q8yy", zoom=0.1)).draw_list == [f, f]

    deduped = SpatialIndex(settings=IndexSettings(dedupe_draw_list=True))
    deduped.insert("9q8yy", f)
    deduped.insert("9q8yy", f)
    assert query_frame(deduped, _view_over("9q8yy", zoom=0.1)).draw_list == [f]


def test_frame_query_does_not_mutate_index_or_leak_between_frames():
    index = SpatialIndex()
    index.insert("9q8yy", MapFeature(id="a"))
    before = index.stats()

    q = FrameQuery(index)
    r1 = q.query_frame(_view_over("9q8yy", zoom=0.1))
    r2 = q.query_frame(_view_over("9q8yy", zoom=0.1))
    far = q.query_frame(_view_over("u4pru", zoom=0.1))

    assert index.stats() == before
    assert r1.keys == r2.keys
    assert r1.draw_list == r2.draw_list
    assert far.draw_list == []
    assert not (far.keys & {"9q8yy"})


def test_visit_hook_receives_grid_cells():
    grid = GridCollector()
    result = query_frame(SpatialIndex(), _view_over("9q8yy", zoom=0.1), on_cell_visited=grid)
    assert set(grid.cells) >= {k for k in result.keys if len(k) == result.probe_length}
    assert result.stats["cellsVisited"] == len(grid.cells)


def test_truncated_frame_is_flagged():
    index = SpatialIndex(settings=IndexSettings(max_cells=3))
    result = query_frame(index, _view_over("9q8yy", zoom=0.1))
    assert result.truncated
    assert result.stats["truncated"] is True


def test_non_positive_zoom_is_rejected():
    with pytest.raises(ValueError):
        query_frame(SpatialIndex(), _view_over("9q8yy", zoom=0.0))


def test_feature_in_cell_just_outside_viewport_is_drawn():
    index = SpatialIndex()
    f2 = MapFeature(id="f2")
    index.insert("9q8yz", f2)

    # The view is exactly cell 9q8yy; 9q8yz only shares its east edge.
    result = query_frame(index, Viewport.around(geohash.decode("9q8yy"), 0.1))
    assert result.probe_length == 5
    assert "9q8yz" in result.keys
    assert result.draw_list == [f2]
