from __future__ import annotations


class InvalidGeohashKey(ValueError):
    """
    Key is empty or contains characters outside the geohash base32 alphabet.
    """


class InvalidCoordinate(ValueError):
    """
    Latitude/longitude outside [-90, 90] / [-180, 180].
    """


class ExpansionLimitExceeded(RuntimeError):
    """
    Viewport expansion touched more cells than `max_cells` allows (strict mode only).
    """

    def __init__(self, *, max_cells: int, seed_key: str, probe_length: int) -> None:
        super().__init__(
            f"Viewport expansion from '{seed_key}' exceeded {max_cells} cells "
            f"at probe length {probe_length}"
        )
        self.max_cells = max_cells
        self.seed_key = seed_key
        self.probe_length = probe_length
