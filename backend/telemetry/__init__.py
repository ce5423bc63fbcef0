"""Optional per-frame log (DuckDB) for the HTTP host."""
