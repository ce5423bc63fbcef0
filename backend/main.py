from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from api.state import frame_log, locked_index, reset_frame_log, reset_index
from geo.aoi import BBox
from geo.resolution import key_length_for_extent
from render.grid import GridCollector, trace_geohash_grid, trace_viewport_bbox
from spatial.errors import ExpansionLimitExceeded
from spatial.frame import FrameQuery
from spatial.types import Viewport

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ApiFeature(BaseModel):
    id: str
    lat: float = Field(ge=-90.0, le=90.0)
    lon: float = Field(ge=-180.0, le=180.0)
    # Angular size in degrees; picks the key length when `length` is omitted.
    latExtent: float = Field(default=0.0, ge=0.0)
    lonExtent: float = Field(default=0.0, ge=0.0)
    length: int | None = Field(default=None, ge=1, le=12)
    props: dict[str, Any] = Field(default_factory=dict)


class ApiFeatureBatch(BaseModel):
    features: list[ApiFeature]


class ApiBBox(BaseModel):
    minLon: float
    minLat: float
    maxLon: float
    maxLat: float


class ApiCenter(BaseModel):
    lat: float
    lon: float


class ApiView(BaseModel):
    center: ApiCenter
    zoom: float = Field(gt=0.0)


class ApiMap(BaseModel):
    bbox: ApiBBox
    view: ApiView


class ApiFrameRequest(BaseModel):
    map: ApiMap
    grid: bool = False


@app.post("/features")
def put_features(body: ApiFeatureBatch):
    with locked_index() as index:
        # Key every feature first so a bad item leaves the index untouched.
        try:
            keyed = [
                (f, index.key_for(f.lat, f.lon, f.length or key_length_for_extent(f.latExtent, f.lonExtent)))
                for f in body.features
            ]
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e
        for f, key in keyed:
            index.insert(key, f)
    return {"keys": [{"id": f.id, "key": key} for f, key in keyed]}


@app.post("/frame")
def frame(body: ApiFrameRequest):
    b = body.map.bbox
    v = body.map.view
    viewport = Viewport(
        center_lat=v.center.lat,
        center_lon=v.center.lon,
        bbox=BBox(min_lon=b.minLon, min_lat=b.minLat, max_lon=b.maxLon, max_lat=b.maxLat).normalized(),
        zoom_level=v.zoom,
    )
    grid = GridCollector() if body.grid else None

    with locked_index() as index:
        try:
            result = FrameQuery(index).query_frame(viewport, on_cell_visited=grid)
        except (ExpansionLimitExceeded, ValueError) as e:
            raise HTTPException(status_code=422, detail=str(e)) from e

    log = frame_log()
    if log is not None:
        log.record(result, v.zoom)

    payload: dict[str, Any] = {
        "drawList": [getattr(f, "id", None) for f in result.draw_list],
        "keys": sorted(result.keys, key=lambda k: (len(k), k)),
        "meta": {"stats": result.stats},
    }
    if grid is not None:
        payload["grid"] = [trace_viewport_bbox(viewport.bbox), trace_geohash_grid(grid.cells)]
    return payload


@app.get("/index/stats")
def index_stats():
    with locked_index() as index:
        return index.stats()


@app.post("/index/reset")
def index_reset():
    reset_index()
    return {"ok": True}


@app.get("/frames/summary")
def frames_summary():
    log = frame_log()
    if log is None:
        return {"enabled": False, "rows": []}
    return {"enabled": True, "rows": log.summary()}


@app.post("/frames/reset")
def frames_reset():
    reset_frame_log()
    return {"ok": True}
