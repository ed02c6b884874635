"""Logging setup for jael lookups.

Service records may carry lookup context through ``extra=``: the ``tile``
being read, the pixel ``window`` requested from it and the lookup ``state``
entered. Formatters surface those fields; anything else passed through
``extra=`` is ignored.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

LOOKUP_FIELDS = ("tile", "window", "state")


@dataclass(frozen=True)
class LogOptions:
    """Console and file logging choices for one CLI run."""

    debug: bool = False
    quiet: bool = False
    log_file: Path | None = None
    json_console: bool = False

    @property
    def console_level(self) -> int:
        if self.quiet:
            return logging.WARNING
        return logging.DEBUG if self.debug else logging.INFO


def lookup_context(record: logging.LogRecord) -> dict[str, Any]:
    """Return the lookup fields attached to a record."""
    context = {}
    for field in LOOKUP_FIELDS:
        value = getattr(record, field, None)
        if value is not None:
            context[field] = list(value) if field == "window" else value
    return context


class JsonFormatter(logging.Formatter):
    """One JSON object per record, lookup context at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(lookup_context(record))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


class HumanFormatter(logging.Formatter):
    """Prefix messages with the tile and window they concern."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = lookup_context(record)
        tile = context.get("tile")
        if not tile:
            return message
        window = context.get("window")
        if window:
            min_column, min_row, max_column, max_row = window
            tile = f"{tile} c{min_column}:{max_column} r{min_row}:{max_row}"
        return f"[{tile}] {message}"


def configure_logging(options: LogOptions) -> logging.Logger:
    """Install console (and optional JSON file) handlers on the root logger."""
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(options.console_level)
    if options.json_console:
        console_handler.setFormatter(JsonFormatter())
    else:
        console_handler.setFormatter(HumanFormatter("%(levelname)s: %(message)s"))
    root.addHandler(console_handler)

    if options.log_file:
        options.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(options.log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(JsonFormatter())
        root.addHandler(file_handler)

    return root
