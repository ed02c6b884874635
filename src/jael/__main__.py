"""Module entrypoint for `python -m jael`."""

from __future__ import annotations

from jael.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
