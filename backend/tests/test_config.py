from __future__ import annotations

import pytest
from pydantic import ValidationError

from spatial.config import IndexSettings, clear_settings_cache, load_settings


def test_defaults():
    s = load_settings()
    assert s.default_length == 6
    assert s.limit_bottom == 8
    assert s.max_cells == 10_000
    assert s.strict_limits is False
    assert s.include_descendants is False


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("GEOINDEX_LIMIT_BOTTOM", "10")
    monkeypatch.setenv("GEOINDEX_STRICT_LIMITS", "true")
    monkeypatch.setenv("GEOINDEX_DEDUPE", "1")
    clear_settings_cache()
    s = load_settings()
    assert s.limit_bottom == 10
    assert s.strict_limits is True
    assert s.dedupe_draw_list is True


def test_yaml_file_then_env(tmp_path, monkeypatch):
    p = tmp_path / "index.yaml"
    p.write_text("index:\n  default_length: 4\n  max_cells: 50\n", encoding="utf-8")
    monkeypatch.setenv("GEOINDEX_CONFIG", str(p))
    monkeypatch.setenv("GEOINDEX_MAX_CELLS", "75")
    clear_settings_cache()
    s = load_settings()
    assert s.default_length == 4
    assert s.max_cells == 75


def test_yaml_root_must_be_mapping(tmp_path, monkeypatch):
    p = tmp_path / "index.yaml"
    p.write_text("- 1\n- 2\n", encoding="utf-8")
    monkeypatch.setenv("GEOINDEX_CONFIG", str(p))
    clear_settings_cache()
    with pytest.raises(ValueError):
        load_settings()


def test_missing_config_file(tmp_path, monkeypatch):
    monkeypatch.setenv("GEOINDEX_CONFIG", str(tmp_path / "nope.yaml"))
    clear_settings_cache()
    with pytest.raises(FileNotFoundError):
        load_settings()


def test_default_length_cannot_exceed_limit():
    with pytest.raises(ValidationError):
        IndexSettings(default_length=9, limit_bottom=8)
    with pytest.raises(ValidationError):
        IndexSettings(limit_bottom=13)


def test_settings_are_frozen():
    s = IndexSettings()
    with pytest.raises(ValidationError):
        s.limit_bottom = 4  # type: ignore[misc]
