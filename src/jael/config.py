"""Service configuration loading helpers."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import jsonschema

from jael.contracts import validate_service_config
from jael.errors import ConfigurationError
from jael.reader import is_remote

ENV_TILE_ROOT = "JAEL_TILE_ROOT"
ENV_TILE_JOBS = "JAEL_TILE_JOBS"
ENV_TIMEOUT = "JAEL_TIMEOUT"


@dataclass(frozen=True)
class ServiceConfig:
    """Read-only settings for an ElevationService."""

    tile_root: str | None = None
    tile_jobs: int = 0
    timeout: float | None = None

    def __post_init__(self) -> None:
        if isinstance(self.tile_jobs, bool) or not isinstance(self.tile_jobs, int):
            raise ConfigurationError("tile_jobs must be an integer.")
        if self.tile_jobs < 0:
            raise ConfigurationError("tile_jobs must be >= 0.")
        if self.timeout is not None and not self.timeout > 0:
            raise ConfigurationError("timeout must be greater than 0.")

    def require_tile_root(self) -> str:
        """Return the tile root or raise when it was never configured."""
        if not self.tile_root:
            raise ConfigurationError("Tile storage location not set.")
        return self.tile_root

    def tile_location(self, filename: str) -> str:
        """Return the full location of a tile file beneath the tile root."""
        root = self.require_tile_root()
        if is_remote(root):
            return f"{root.rstrip('/')}/{filename}"
        return str(Path(root) / filename)

    def as_dict(self) -> dict[str, Any]:
        return {
            "tile_root": self.tile_root,
            "tile_jobs": self.tile_jobs,
            "timeout": self.timeout,
        }


def check_tile_root(tile_root: str | None) -> None:
    """Raise ConfigurationError when a local tile root is not a directory."""
    if not tile_root or is_remote(tile_root):
        return
    if not Path(tile_root).is_dir():
        raise ConfigurationError(f"Tile storage location is not a directory: {tile_root}")


def _env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """Return config values set through environment variables."""
    payload: dict[str, Any] = {}
    tile_root = environ.get(ENV_TILE_ROOT)
    if tile_root:
        payload["tile_root"] = tile_root
    tile_jobs = environ.get(ENV_TILE_JOBS)
    if tile_jobs:
        try:
            payload["tile_jobs"] = int(tile_jobs)
        except ValueError as exc:
            raise ConfigurationError(f"{ENV_TILE_JOBS} must be an integer.") from exc
    timeout = environ.get(ENV_TIMEOUT)
    if timeout:
        try:
            payload["timeout"] = float(timeout)
        except ValueError as exc:
            raise ConfigurationError(f"{ENV_TIMEOUT} must be a number.") from exc
    return payload


def _load_config_file(path: Path) -> dict[str, Any]:
    """Load a JSON config file from disk."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Unable to read config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError("Service config must be a JSON object.")
    return data


def normalize_service_config(payload: Mapping[str, Any]) -> ServiceConfig:
    """Validate a raw config payload and return a ServiceConfig."""
    try:
        validate_service_config(payload)
    except jsonschema.ValidationError as exc:
        raise ConfigurationError(f"Invalid service config: {exc.message}") from exc
    timeout = payload.get("timeout")
    return ServiceConfig(
        tile_root=payload.get("tile_root") or None,
        tile_jobs=int(payload.get("tile_jobs", 0)),
        timeout=float(timeout) if timeout is not None else None,
    )


def load_service_config(
    path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    **overrides: Any,
) -> ServiceConfig:
    """Resolve service config from a JSON file, environment, then overrides.

    Later sources win; overrides whose value is None are ignored.
    """
    payload: dict[str, Any] = {}
    if path:
        payload.update(_load_config_file(path))
    payload.update(_env_overrides(os.environ if environ is None else environ))
    payload.update({key: value for key, value in overrides.items() if value is not None})
    return normalize_service_config(payload)
