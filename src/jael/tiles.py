"""Tile naming and point-to-pixel helpers for 1-degree ASTER GDEM tiles."""

from __future__ import annotations

import math
import re
from typing import Tuple

from jael.models import PixelCoordinate, PixelLocation, Point

Bounds = Tuple[int, int, int, int]

PIXELS_PER_DEGREE = 3600
PIXEL_WIDTH = 1 / PIXELS_PER_DEGREE
TILE_SIZE = PIXELS_PER_DEGREE + 1
MAX_LATITUDE = 83
MAX_LONGITUDE = 180
TILE_PREFIX = "ASTGTMV003_"
TILE_SUFFIX = "_dem.tif"

_TILE_NAME = re.compile(r"([NS])(\d{2})([EW])(\d{3})")


def tile_origin(value: float) -> int:
    """Return the whole degree of the tile's south/west edge for a coordinate.

    Negative values step one degree down before truncating, so ``-3.1``
    maps to ``-4`` and an exact ``-4.0`` maps to ``-5``.
    """
    if value < 0:
        return math.trunc(value - 1)
    return math.trunc(value)


def tile_name(lat: int, lon: int) -> str:
    """Format a N/S/E/W tile name from integer origin degrees."""
    lat_prefix = "S" if lat < 0 else "N"
    lon_prefix = "W" if lon < 0 else "E"
    return f"{lat_prefix}{abs(lat):02d}{lon_prefix}{abs(lon):03d}"


def tile_filename(lat: int, lon: int) -> str:
    """Return the GeoTIFF filename for a tile origin."""
    return f"{TILE_PREFIX}{tile_name(lat, lon)}{TILE_SUFFIX}"


def parse_tile_name(name: str) -> tuple[int, int]:
    """Parse a tile name or filename into integer origin latitude/longitude."""
    match = _TILE_NAME.search(name)
    if not match:
        raise ValueError(f"Invalid tile name: {name}")
    lat = int(match.group(2))
    lon = int(match.group(4))
    if match.group(1) == "S":
        lat = -lat
    if match.group(3) == "W":
        lon = -lon
    return lat, lon


def tile_bounds(name: str) -> Bounds:
    """Return bounding coordinates for a tile name as (min_lon, min_lat, max_lon, max_lat)."""
    lat, lon = parse_tile_name(name)
    return (lon, lat, lon + 1, lat + 1)


def check_coordinates(lat: float, lng: float) -> None:
    """Raise ValueError when a coordinate cannot be located on the tile grid."""
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise ValueError(f"Coordinates must be finite: ({lat}, {lng})")
    if abs(lat) > MAX_LATITUDE or abs(lng) > MAX_LONGITUDE:
        raise ValueError(f"Coordinates out of bounds: ({lat}, {lng})")


def locate(point: Point) -> PixelLocation:
    """Return the tile filename and pixel containing a point."""
    lat = point.latitude
    lng = point.longitude
    check_coordinates(lat, lng)

    origin_lng = tile_origin(lng)
    origin_lat = tile_origin(lat)

    # Pixel centres sit on whole degrees, so the raster's upper-left corner
    # is half a pixel outside the tile's north-west corner.
    offset = PIXEL_WIDTH / 2
    tiff_origin_lng = origin_lng - offset
    tiff_origin_lat = origin_lat + 1 + offset

    column = math.trunc((lng - tiff_origin_lng) / PIXEL_WIDTH)
    row = math.trunc((tiff_origin_lat - lat) / PIXEL_WIDTH)
    return PixelLocation(
        tile=tile_filename(origin_lat, origin_lng),
        pixel=PixelCoordinate(column=column, row=row),
    )
