"""Group located points into one pixel batch per tile."""

from __future__ import annotations

from typing import Iterable

from jael.errors import OUT_OF_RANGE, ValidationError
from jael.models import Batch, PixelLocation, Point
from jael.tiles import locate


class PixelBatcher:
    """Accumulate points into per-tile batches with deduplicated pixels.

    Batches keep first-seen tile order so repeated runs over the same input
    produce identical batch lists.
    """

    def __init__(self) -> None:
        self._batches: dict[str, Batch] = {}

    def add(self, index: int, location: PixelLocation) -> None:
        """Record the located pixel for point ``index``."""
        batch = self._batches.get(location.tile)
        if batch is None:
            self._batches[location.tile] = Batch.start(location, index)
            return
        batch.add(location.pixel, index)

    def add_point(self, index: int, point: Point) -> None:
        """Locate ``point`` and record it; unlocatable points raise ValidationError."""
        try:
            location = locate(point)
        except ValueError as exc:
            raise ValidationError(index, OUT_OF_RANGE, str(exc)) from exc
        self.add(index, location)

    def batches(self) -> list[Batch]:
        return list(self._batches.values())

    def __len__(self) -> int:
        return len(self._batches)


def build_batches(points: Iterable[Point]) -> list[Batch]:
    """Return per-tile batches for an ordered point sequence."""
    batcher = PixelBatcher()
    for index, point in enumerate(points):
        batcher.add_point(index, point)
    return batcher.batches()
