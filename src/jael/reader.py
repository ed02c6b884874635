"""Raster window readers for DEM tiles."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

import numpy as np
import rasterio
from rasterio.windows import Window

from jael.models import PixelWindow

REMOTE_PREFIXES = ("http://", "https://", "s3://", "gs://", "az://", "/vsi")


def is_remote(location: str) -> bool:
    """Return True when a location is handled by GDAL's virtual file systems."""
    return location.startswith(REMOTE_PREFIXES)


def to_rasterio_window(window: PixelWindow) -> Window:
    """Convert a half-open pixel window into a rasterio Window."""
    return Window.from_slices(
        (window.min_row, window.max_row),
        (window.min_column, window.max_column),
    )


class RasterWindowReader(Protocol):
    """Read one band window from a tile location."""

    def read(self, location: str, window: PixelWindow) -> np.ndarray:
        """Return the window as a flat, row-major array."""
        ...


class RasterioWindowReader:
    """Read DEM windows from GeoTIFFs with rasterio."""

    def __init__(self, band: int = 1) -> None:
        self.band = band

    def read(self, location: str, window: PixelWindow) -> np.ndarray:
        if not is_remote(location) and not Path(location).exists():
            raise FileNotFoundError(f"No such file or directory: {location}")
        with rasterio.open(location) as dataset:
            data = dataset.read(self.band, window=to_rasterio_window(window))
        return data.ravel()
