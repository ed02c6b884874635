from __future__ import annotations

import os
import threading
from pathlib import Path

import numpy as np
import rasterio
from rasterio.transform import from_origin

from jael.models import PixelWindow
from jael.tiles import PIXEL_WIDTH, TILE_SIZE, tile_filename


def synthetic_elevation(column: np.ndarray | int, row: np.ndarray | int) -> np.ndarray | int:
    """Deterministic elevation pattern keyed by pixel position."""
    return (row * 37 + column * 11) % 4000


def synthetic_tile(size: int = TILE_SIZE) -> np.ndarray:
    rows = np.arange(size, dtype=np.int32)[:, np.newaxis]
    columns = np.arange(size, dtype=np.int32)[np.newaxis, :]
    return synthetic_elevation(columns, rows).astype(np.int16)


def write_tile(root: Path, lat: int, lon: int, data: np.ndarray) -> Path:
    """Write a single-band GeoTIFF named and georeferenced like an ASTER tile."""
    height, width = data.shape
    transform = from_origin(
        lon - PIXEL_WIDTH / 2,
        lat + 1 + PIXEL_WIDTH / 2,
        PIXEL_WIDTH,
        PIXEL_WIDTH,
    )
    path = root / tile_filename(lat, lon)
    path.parent.mkdir(parents=True, exist_ok=True)
    with rasterio.open(
        path,
        "w",
        driver="GTiff",
        height=height,
        width=width,
        count=1,
        dtype=data.dtype,
        crs="EPSG:4326",
        transform=transform,
        nodata=-9999,
        compress="deflate",
    ) as dataset:
        dataset.write(data, 1)
    return path


class PatternReader:
    """In-memory reader serving the synthetic pattern for any tile."""

    def __init__(self, missing: tuple[str, ...] = ()) -> None:
        self.missing = missing
        self.calls: list[tuple[str, PixelWindow]] = []
        self._lock = threading.Lock()

    def read(self, location: str, window: PixelWindow) -> np.ndarray:
        with self._lock:
            self.calls.append((location, window))
        if any(location.endswith(name) for name in self.missing):
            raise FileNotFoundError(f"No such file or directory: {location}")
        rows, columns = np.mgrid[
            window.min_row : window.max_row, window.min_column : window.max_column
        ]
        return synthetic_elevation(columns, rows).astype(np.int16).ravel()


def with_src_env(base_env: dict[str, str] | None = None) -> dict[str, str]:
    """Return an environment with repo src/ on PYTHONPATH."""
    env = dict(base_env or os.environ)
    src_path = Path(__file__).resolve().parents[1] / "src"
    existing = env.get("PYTHONPATH", "")
    entries = [entry for entry in existing.split(os.pathsep) if entry]
    if str(src_path) not in entries:
        entries.insert(0, str(src_path))
    env["PYTHONPATH"] = os.pathsep.join(entries)
    return env
