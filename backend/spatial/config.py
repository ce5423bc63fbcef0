from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator


class IndexSettings(BaseModel):
    """
    Index configuration. Frozen: fixed once an index is built from it.
    """

    model_config = ConfigDict(frozen=True)

    # Key length used by `put()` when none is given or computed.
    default_length: int = Field(default=6, ge=1, le=12)
    # Longest allowed key; longer keys are truncated.
    limit_bottom: int = Field(default=8, ge=1, le=12)
    # Angular probe size (degrees) at zoom 1; divided by zoom per frame.
    probe_extent: float = Field(default=0.0015, gt=0.0)
    # Hard ceiling on working keys per frame.
    max_cells: int = Field(default=10_000, ge=1)
    # Raise instead of truncating when `max_cells` is hit.
    strict_limits: bool = False
    # Also draw features indexed finer than the probe resolution.
    include_descendants: bool = False
    # Drop repeated features (by identity) from the draw list.
    dedupe_draw_list: bool = False

    @model_validator(mode="after")
    def _default_within_limit(self) -> "IndexSettings":
        if self.default_length > self.limit_bottom:
            raise ValueError(
                f"default_length ({self.default_length}) must not exceed "
                f"limit_bottom ({self.limit_bottom})"
            )
        return self


_ENV_FIELDS: dict[str, str] = {
    "GEOINDEX_DEFAULT_LENGTH": "default_length",
    "GEOINDEX_LIMIT_BOTTOM": "limit_bottom",
    "GEOINDEX_PROBE_EXTENT": "probe_extent",
    "GEOINDEX_MAX_CELLS": "max_cells",
    "GEOINDEX_STRICT_LIMITS": "strict_limits",
    "GEOINDEX_INCLUDE_DESCENDANTS": "include_descendants",
    "GEOINDEX_DEDUPE": "dedupe_draw_list",
}


def config_path() -> Path | None:
    raw = (os.getenv("GEOINDEX_CONFIG") or "").strip()
    return Path(raw) if raw else None


def _load_yaml(path: Path) -> dict[str, Any]:
    raw = path.read_text(encoding="utf-8")
    data = yaml.safe_load(raw) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid index config yaml root: {path}")
    # Allow nesting under an `index:` section.
    section = data.get("index", data)
    if not isinstance(section, dict):
        raise ValueError(f"Invalid `index` section in config: {path}")
    return dict(section)


def _env_overrides() -> dict[str, str]:
    out: dict[str, str] = {}
    for env_name, field_name in _ENV_FIELDS.items():
        raw = (os.getenv(env_name) or "").strip()
        if raw:
            out[field_name] = raw
    return out


@lru_cache(maxsize=1)
def load_settings() -> IndexSettings:
    """
    Settings from `GEOINDEX_CONFIG` (YAML), overridden by `GEOINDEX_*` env vars.

    Cached for the process lifetime; see `clear_settings_cache()`.
    """
    values: dict[str, Any] = {}
    p = config_path()
    if p is not None:
        if not p.exists():
            raise FileNotFoundError(f"GEOINDEX_CONFIG points to a missing file: {p}")
        values.update(_load_yaml(p))
    values.update(_env_overrides())
    return IndexSettings.model_validate(values)


def clear_settings_cache() -> None:
    load_settings.cache_clear()
