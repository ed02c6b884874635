"""Write decoded raster samples back onto output points."""

from __future__ import annotations

from typing import Any, Iterable, MutableMapping, MutableSequence

import numpy as np

from jael.errors import IntegrityError
from jael.models import Batch

ELEVATION_KEY = "elev"


def _as_number(value: Any) -> Any:
    """Return a plain Python number for numpy scalars."""
    if isinstance(value, np.generic):
        return value.item()
    return value


def scatter_batch(
    batch: Batch,
    raster: np.ndarray,
    output: MutableSequence[MutableMapping[str, Any]],
) -> None:
    """Populate ``output`` with samples from a batch's decoded window.

    ``raster`` is the row-major window returned by the reader. Each pixel's
    value is copied to every point index recorded against it; other indices
    are left untouched.
    """
    window = batch.window
    values = np.asarray(raster).ravel()
    if values.size < window.size:
        raise IntegrityError(batch.tile, expected=window.size, actual=int(values.size))
    for entry in batch.entries:
        offset = (entry.pixel.column - window.min_column) + (
            entry.pixel.row - window.min_row
        ) * window.width
        elevation = _as_number(values[offset])
        for index in entry.indices:
            output[index][ELEVATION_KEY] = elevation


def merge_batches(
    batches: Iterable[Batch],
    rasters: Iterable[np.ndarray],
    output: MutableSequence[MutableMapping[str, Any]],
) -> MutableSequence[MutableMapping[str, Any]]:
    """Scatter every batch into ``output`` and return it."""
    for batch, raster in zip(batches, rasters, strict=True):
        scatter_batch(batch, raster, output)
    return output
