"""Timing helpers for elevation lookups and benchmarks."""

from __future__ import annotations

import os
import threading
import tracemalloc
from contextlib import contextmanager
from pathlib import Path
from time import perf_counter
from typing import Any, Iterator

ENV_PROFILE_DIR = "JAEL_PROFILE_DIR"


class PerfTracker:
    """Capture named timing spans and an optional memory peak.

    Spans may be recorded from several threads; a service shared between
    concurrent requests records into one tracker.
    """

    def __init__(self, *, enabled: bool = True, track_memory: bool = False) -> None:
        self.enabled = enabled
        self.track_memory = track_memory
        self._lock = threading.Lock()
        self._totals: dict[str, float] = {}
        self._counts: dict[str, int] = {}
        self._start_time: float | None = None
        self._end_time: float | None = None
        self._peak_memory: float | None = None
        self._mem_started = False

    def start(self) -> None:
        if not self.enabled:
            return
        self._start_time = perf_counter()
        if self.track_memory and not tracemalloc.is_tracing():
            tracemalloc.start()
            self._mem_started = True

    def stop(self) -> None:
        if not self.enabled or self._end_time is not None:
            return
        self._end_time = perf_counter()
        if self.track_memory and tracemalloc.is_tracing():
            _, peak = tracemalloc.get_traced_memory()
            self._peak_memory = peak / (1024 * 1024)
            if self._mem_started:
                tracemalloc.stop()

    @contextmanager
    def span(self, name: str) -> Iterator[None]:
        """Measure a named span of work."""
        if not self.enabled:
            yield
            return
        start = perf_counter()
        try:
            yield
        finally:
            elapsed = perf_counter() - start
            with self._lock:
                self._totals[name] = self._totals.get(name, 0.0) + elapsed
                self._counts[name] = self._counts.get(name, 0) + 1

    def summary(self) -> dict[str, Any]:
        """Return a JSON-serializable summary of captured spans."""
        if not self.enabled:
            return {}
        total_seconds = 0.0
        if self._start_time is not None and self._end_time is not None:
            total_seconds = max(0.0, self._end_time - self._start_time)
        with self._lock:
            spans = {
                name: {"seconds": round(total, 6), "count": self._counts.get(name, 0)}
                for name, total in sorted(self._totals.items())
            }
        summary: dict[str, Any] = {"total_seconds": round(total_seconds, 6), "spans": spans}
        if self._peak_memory is not None:
            summary["peak_memory_mb"] = round(self._peak_memory, 3)
        return summary


def resolve_metrics_path(metrics_json: str | None) -> Path | None:
    """Resolve where benchmark metrics are written, from CLI or environment."""
    if metrics_json:
        return Path(metrics_json)
    profile_dir = os.environ.get(ENV_PROFILE_DIR)
    if profile_dir:
        return Path(profile_dir) / "bench_metrics.json"
    return None
