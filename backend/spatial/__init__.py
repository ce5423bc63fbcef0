"""
Geohash spatial index for per-frame viewport queries.

`SpatialIndex` stores features by geohash key; `FrameQuery` turns a viewport into
the list of features to draw for one frame.
"""
