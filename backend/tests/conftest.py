import sys
from pathlib import Path

import pytest


# Ensure `backend/` is on sys.path so tests can import local modules
# like `geo.*`, `spatial.*`, and `main`.
BACKEND_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BACKEND_ROOT))


@pytest.fixture(autouse=True)
def _isolated_state(monkeypatch):
    # The frame log is opt-in per test; the shared index and cached settings are
    # rebuilt for every test.
    from api.state import reset_frame_log, reset_index
    from spatial.config import clear_settings_cache

    monkeypatch.delenv("GEOINDEX_FRAME_LOG", raising=False)
    for name in (
        "GEOINDEX_CONFIG",
        "GEOINDEX_DEFAULT_LENGTH",
        "GEOINDEX_LIMIT_BOTTOM",
        "GEOINDEX_PROBE_EXTENT",
        "GEOINDEX_MAX_CELLS",
        "GEOINDEX_STRICT_LIMITS",
        "GEOINDEX_INCLUDE_DESCENDANTS",
        "GEOINDEX_DEDUPE",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    reset_index()
    yield
    clear_settings_cache()
    reset_index()
    reset_frame_log()
