"""Elevation service: validate, batch, read tile windows, scatter results."""

from __future__ import annotations

import copy
import enum
import logging
import os
import threading
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import Any, Mapping, Sequence

import numpy as np

from jael.batching import build_batches
from jael.config import ServiceConfig, check_tile_root
from jael.contracts import validate_request
from jael.errors import DECODE_FAILURE, NOT_FOUND, TIMEOUT, ElevationError, TileReadError
from jael.models import Batch, Point
from jael.perf import PerfTracker
from jael.reader import RasterioWindowReader, RasterWindowReader
from jael.scatter import merge_batches

LOGGER = logging.getLogger("jael.service")


class LookupState(enum.Enum):
    """Stages of a single elevation lookup."""

    VALIDATING = "validating"
    BATCHING = "batching"
    AWAITING_RASTERS = "awaiting_rasters"
    SCATTERING = "scattering"
    DONE = "done"
    FAILED = "failed"


def coerce_tile_jobs(tile_jobs: int, batch_count: int) -> int:
    """Normalize requested worker count for per-tile reads."""
    jobs = int(tile_jobs)
    if batch_count <= 0:
        return 1
    if jobs < 0:
        raise ValueError("tile_jobs must be >= 0")
    if jobs == 0:
        cpu_count = os.cpu_count() or 1
        return max(1, min(cpu_count, batch_count))
    return min(jobs, batch_count)


def _copy_point(point: Any) -> Any:
    # Non-mapping points never pass validation; leave them for it to report.
    return copy.deepcopy(dict(point)) if isinstance(point, Mapping) else point


def _snapshot_request(request: Any) -> Any:
    """Detach a request's points from the caller, leaving malformed input as is."""
    if not isinstance(request, Mapping):
        return request
    snapshot = dict(request)
    points = snapshot.get("points")
    if isinstance(points, Sequence) and not isinstance(points, (str, bytes)):
        snapshot["points"] = [_copy_point(point) for point in points]
    return snapshot


def _read_error(tile: str, exc: Exception) -> TileReadError:
    """Wrap a reader failure with the tile it concerns."""
    kind = NOT_FOUND if isinstance(exc, FileNotFoundError) else DECODE_FAILURE
    return TileReadError(tile, kind, str(exc))


class ElevationService:
    """Resolve elevations for point lists from a configured tile store.

    The config is fixed at construction. Each call works on its own copy of
    the points, its own batches and its own read pool, so one instance can
    serve concurrent calls.
    """

    def __init__(
        self,
        config: ServiceConfig | None = None,
        *,
        reader: RasterWindowReader | None = None,
        perf: PerfTracker | None = None,
    ) -> None:
        self.config = config or ServiceConfig()
        check_tile_root(self.config.tile_root)
        self.reader = reader or RasterioWindowReader()
        self.perf = perf or PerfTracker(enabled=False)
        self._pool_lock = threading.Lock()
        self._request_pool: ThreadPoolExecutor | None = None
        self._closed = False

    def __enter__(self) -> "ElevationService":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Shut down the pool used by submit()."""
        with self._pool_lock:
            self._closed = True
            pool, self._request_pool = self._request_pool, None
        if pool is not None:
            pool.shutdown(wait=True)

    def get_elevations(self, request: Mapping[str, Any]) -> list[dict[str, Any]]:
        """Return a copy of ``request["points"]`` with an ``elev`` on every point."""
        self.config.require_tile_root()
        state = LookupState.VALIDATING
        try:
            with self.perf.span("validate"):
                points = validate_request(request)
                output = [_copy_point(point) for point in points]

            state = self._advance(state, LookupState.BATCHING)
            with self.perf.span("batch"):
                batches = build_batches(
                    Point(latitude=float(point["lat"]), longitude=float(point["lng"]))
                    for point in output
                )
            LOGGER.debug("Batched %s point(s) into %s tile(s).", len(output), len(batches))

            state = self._advance(state, LookupState.AWAITING_RASTERS)
            with self.perf.span("read"):
                rasters = self._read_batches(batches)

            state = self._advance(state, LookupState.SCATTERING)
            with self.perf.span("scatter"):
                merge_batches(batches, rasters, output)
        except ElevationError as exc:
            self._advance(state, LookupState.FAILED)
            LOGGER.debug("Lookup failed: %s", exc)
            raise
        self._advance(state, LookupState.DONE)
        return output

    def submit(self, request: Mapping[str, Any]) -> Future[list[dict[str, Any]]]:
        """Run get_elevations() in the background and return its future."""
        snapshot = _snapshot_request(request)
        with self._pool_lock:
            if self._closed:
                raise RuntimeError("ElevationService is closed.")
            if self._request_pool is None:
                self._request_pool = ThreadPoolExecutor(thread_name_prefix="jael-request")
            return self._request_pool.submit(self.get_elevations, snapshot)

    @staticmethod
    def _advance(current: LookupState, new: LookupState) -> LookupState:
        LOGGER.debug("Lookup %s -> %s", current.value, new.value, extra={"state": new.value})
        return new

    def _read_batch(self, batch: Batch) -> np.ndarray:
        """Read the window needed by one batch."""
        location = self.config.tile_location(batch.tile)
        window = batch.window
        LOGGER.debug(
            "Reading %sx%s window for %s pixel(s).",
            window.width,
            window.height,
            len(batch.entries),
            extra={
                "tile": batch.tile,
                "window": (
                    window.min_column,
                    window.min_row,
                    window.max_column,
                    window.max_row,
                ),
            },
        )
        try:
            return self.reader.read(location, window)
        except ElevationError:
            raise
        except Exception as exc:
            raise _read_error(batch.tile, exc) from exc

    def _read_batches(self, batches: list[Batch]) -> list[np.ndarray]:
        """Read every batch window, failing the whole set on the first error."""
        if not batches:
            return []
        jobs = coerce_tile_jobs(self.config.tile_jobs, len(batches))
        timeout = self.config.timeout
        if timeout is None and (jobs == 1 or len(batches) == 1):
            return [self._read_batch(batch) for batch in batches]

        executor = ThreadPoolExecutor(max_workers=jobs, thread_name_prefix="jael-read")
        try:
            futures = [executor.submit(self._read_batch, batch) for batch in batches]
            done, pending = wait(futures, timeout=timeout, return_when=FIRST_EXCEPTION)
            for future in futures:
                error = future.exception() if future in done else None
                if error is not None:
                    raise error
            if pending:
                tile = next(
                    batch.tile for batch, future in zip(batches, futures) if future in pending
                )
                raise TileReadError(tile, TIMEOUT, f"Read did not finish within {timeout}s.")
            return [future.result() for future in futures]
        finally:
            executor.shutdown(wait=False, cancel_futures=True)


def get_elevations(
    request: Mapping[str, Any],
    *,
    tile_root: str | None = None,
    config: ServiceConfig | None = None,
    reader: RasterWindowReader | None = None,
) -> list[dict[str, Any]]:
    """Resolve elevations with a one-off service."""
    if config is None:
        config = ServiceConfig(tile_root=tile_root)
    service = ElevationService(config, reader=reader)
    try:
        return service.get_elevations(request)
    finally:
        service.close()
