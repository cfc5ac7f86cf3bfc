"""Root test configuration for patgrep.

Isolates every test from the developer's environment: PATGREP_* variables are
removed and the default config search paths are emptied, so a real
``~/.patgrep/config.yaml`` never leaks into a test. Config tests that exercise
the search order set the paths they need explicitly.
"""

from __future__ import annotations

from typing import Iterator

import pytest

import patgrep.config
from patgrep.utils.logger import configure_logging

PATGREP_ENV_VARS = ("PATGREP_CONFIG", "PATGREP_LOG_LEVEL", "PATGREP_CHUNK_SIZE")


@pytest.fixture(autouse=True)
def isolate_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove PATGREP_* env vars and the default config search paths."""
    for name in PATGREP_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(patgrep.config, "DEFAULT_CONFIG_PATHS", [])


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Restore the quiet default log level after tests that raise it (e.g. --verbose)."""
    yield
    configure_logging()
