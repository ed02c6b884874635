"""Multi-point elevation lookups from 1-degree ASTER GDEM GeoTIFF tiles."""

from __future__ import annotations

__version__ = "1.1.0"

from jael.config import ServiceConfig, load_service_config
from jael.errors import (
    ConfigurationError,
    ElevationError,
    IntegrityError,
    TileReadError,
    ValidationError,
)
from jael.service import ElevationService, get_elevations
from jael.tiles import locate, tile_filename

__all__ = [
    "ConfigurationError",
    "ElevationError",
    "ElevationService",
    "IntegrityError",
    "ServiceConfig",
    "TileReadError",
    "ValidationError",
    "__version__",
    "get_elevations",
    "load_service_config",
    "locate",
    "tile_filename",
]
