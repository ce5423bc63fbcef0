from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import duckdb

from spatial.types import FrameResult

CREATE_SQL = """
CREATE TABLE IF NOT EXISTS frames (
  ts_ms BIGINT,
  zoom_level DOUBLE,
  probe_length INTEGER,
  cell_keys INTEGER,
  keys INTEGER,
  features INTEGER,
  truncated BOOLEAN,
  total_ms DOUBLE
);
"""

INSERT_SQL = "INSERT INTO frames VALUES (?, ?, ?, ?, ?, ?, ?, ?)"

SUMMARY_SQL = """
SELECT
  probe_length,
  COUNT(*) AS n,
  AVG(total_ms),
  quantile_cont(total_ms, 0.95),
  AVG(cell_keys),
  AVG(features),
  AVG(CASE WHEN truncated THEN 1 ELSE 0 END)
FROM frames
GROUP BY probe_length
ORDER BY probe_length
"""


@dataclass
class FrameLog:
    """
    One row per answered frame: probe length, working-set size, draw-list size
    and total time. Written synchronously; meant for local profiling.
    """

    path: Path
    _conn: duckdb.DuckDBPyConnection | None = field(default=None, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def _connect(self) -> duckdb.DuckDBPyConnection:
        if self._conn is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = duckdb.connect(str(self.path))
            self._conn.execute(CREATE_SQL)
        return self._conn

    def record(self, result: FrameResult, zoom_level: float) -> None:
        s = result.stats
        row = (
            int(time.time() * 1000),
            float(zoom_level),
            result.probe_length,
            int(s.get("cellKeys", 0)),
            len(result.keys),
            len(result.draw_list),
            result.truncated,
            float(s.get("timingsMs", {}).get("total", 0.0)),
        )
        with self._lock:
            self._connect().execute(INSERT_SQL, row)

    def count(self) -> int:
        with self._lock:
            return int(self._connect().execute("SELECT COUNT(*) FROM frames").fetchone()[0])

    def summary(self) -> list[dict[str, Any]]:
        with self._lock:
            rows = self._connect().execute(SUMMARY_SQL).fetchall()
        return [
            {
                "probeLength": int(probe_length),
                "n": int(n),
                "avgTotalMs": float(avg_ms),
                "p95TotalMs": float(p95_ms),
                "avgCellKeys": float(avg_cells),
                "avgFeatures": float(avg_features),
                "truncatedRate": float(truncated_rate),
            }
            for probe_length, n, avg_ms, p95_ms, avg_cells, avg_features, truncated_rate in rows
        ]

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def reset(self) -> None:
        self.close()
        self.path.unlink(missing_ok=True)
