"""Exception types raised by elevation lookups."""

from __future__ import annotations

MALFORMED = "malformed"
WRONG_TYPE = "type"
OUT_OF_RANGE = "range"

NOT_FOUND = "not_found"
DECODE_FAILURE = "decode_failure"
TIMEOUT = "timeout"

_VALIDATION_MESSAGES = {
    MALFORMED: "Malformed point at index {index}",
    WRONG_TYPE: "Unexpected type at point index {index}",
    OUT_OF_RANGE: "Lat or lng out of bounds at point index {index}",
}


class ElevationError(Exception):
    """Base class for all elevation lookup failures."""

    pass


class ValidationError(ElevationError, ValueError):
    """Raised when a request or one of its points is malformed."""

    def __init__(self, index: int | None, reason: str, detail: str | None = None) -> None:
        self.index = index
        self.reason = reason
        self.detail = detail
        if index is None:
            message = detail or "Malformed elevation request"
        else:
            message = _VALIDATION_MESSAGES[reason].format(index=index)
            if detail:
                message = f"{message}: {detail}"
        super().__init__(message)


class ConfigurationError(ElevationError, RuntimeError):
    """Raised when the tile storage location is missing or unusable."""

    pass


class TileReadError(ElevationError, RuntimeError):
    """Raised when a tile window cannot be read."""

    def __init__(self, tile: str, kind: str, detail: str) -> None:
        self.tile = tile
        self.kind = kind
        super().__init__(f"Failed to read tile {tile} ({kind}): {detail}")


class IntegrityError(ElevationError, RuntimeError):
    """Raised when a decoded raster does not cover the requested window."""

    def __init__(self, tile: str, expected: int, actual: int) -> None:
        self.tile = tile
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Raster for tile {tile} has {actual} value(s); window requires {expected}."
        )
