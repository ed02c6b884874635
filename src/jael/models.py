"""Data models used by the point-to-pixel batching engine."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Point:
    """Geographic coordinate in decimal degrees (WGS84)."""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class PixelCoordinate:
    """Integer pixel position inside a tile raster."""

    column: int
    row: int


@dataclass(frozen=True)
class PixelLocation:
    """Tile filename plus the pixel a point falls in."""

    tile: str
    pixel: PixelCoordinate


@dataclass(frozen=True)
class PixelWindow:
    """Half-open pixel window ``[min, max)`` passed to raster readers."""

    min_column: int
    min_row: int
    max_column: int
    max_row: int

    @property
    def width(self) -> int:
        return self.max_column - self.min_column

    @property
    def height(self) -> int:
        return self.max_row - self.min_row

    @property
    def size(self) -> int:
        return self.width * self.height


@dataclass
class MinMax:
    """Inclusive pixel bounding box that only ever grows."""

    min_column: int
    min_row: int
    max_column: int
    max_row: int

    @classmethod
    def from_pixel(cls, pixel: PixelCoordinate) -> "MinMax":
        return cls(pixel.column, pixel.row, pixel.column, pixel.row)

    def extend(self, pixel: PixelCoordinate) -> None:
        """Widen the box so it contains ``pixel``."""
        self.min_column = min(self.min_column, pixel.column)
        self.min_row = min(self.min_row, pixel.row)
        self.max_column = max(self.max_column, pixel.column)
        self.max_row = max(self.max_row, pixel.row)

    def window(self) -> PixelWindow:
        """Return the half-open read window covering the box."""
        return PixelWindow(
            min_column=self.min_column,
            min_row=self.min_row,
            max_column=self.max_column + 1,
            max_row=self.max_row + 1,
        )


@dataclass
class PixelEntry:
    """A unique pixel within a tile and the point indices that need it."""

    pixel: PixelCoordinate
    indices: list[int] = field(default_factory=list)


@dataclass
class Batch:
    """All pixels that must be read from one tile for one request."""

    tile: str
    entries: list[PixelEntry]
    bounds: MinMax
    _lookup: dict[PixelCoordinate, PixelEntry] = field(
        default_factory=dict, repr=False, compare=False
    )

    @classmethod
    def start(cls, location: PixelLocation, index: int) -> "Batch":
        """Create a batch seeded with its first point."""
        entry = PixelEntry(location.pixel, [index])
        return cls(
            tile=location.tile,
            entries=[entry],
            bounds=MinMax.from_pixel(location.pixel),
            _lookup={location.pixel: entry},
        )

    def add(self, pixel: PixelCoordinate, index: int) -> None:
        """Record that point ``index`` samples ``pixel``."""
        entry = self._lookup.get(pixel)
        if entry is not None:
            entry.indices.append(index)
            return
        entry = PixelEntry(pixel, [index])
        self.entries.append(entry)
        self._lookup[pixel] = entry
        self.bounds.extend(pixel)

    @property
    def window(self) -> PixelWindow:
        return self.bounds.window()

    @property
    def point_count(self) -> int:
        return sum(len(entry.indices) for entry in self.entries)
