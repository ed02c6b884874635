from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

import pytest  # noqa: E402

from jael import config as service_config  # noqa: E402
from jael.perf import ENV_PROFILE_DIR  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch) -> None:
    """Prevent local JAEL_* settings from bleeding into tests."""
    for name in (
        service_config.ENV_TILE_ROOT,
        service_config.ENV_TILE_JOBS,
        service_config.ENV_TIMEOUT,
        ENV_PROFILE_DIR,
    ):
        monkeypatch.delenv(name, raising=False)
