# tests/conftest.py
# Isolate tests from PK_* settings in the developer's environment and provide
# resolver fixtures rooted in per-test temporary directories.

from __future__ import annotations

import io
import os
from pathlib import Path

import pytest

from pathkeep.logging import StructuredLogger
from pathkeep.resolver import PathResolver


@pytest.fixture(autouse=True)
def clean_pk_env(monkeypatch):
    """Drop PK_* variables so Settings() sees defaults."""
    for name in list(os.environ):
        if name.startswith("PK_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def root(tmp_path: Path) -> Path:
    """An empty project root directory."""
    path = tmp_path / "app"
    path.mkdir()
    return path


@pytest.fixture
def log_stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def memory_logger(log_stream) -> StructuredLogger:
    """A structured logger writing JSON lines into ``log_stream``."""
    return StructuredLogger(component="test", output_file=log_stream, min_level="debug")


@pytest.fixture
def resolver(root: Path) -> PathResolver:
    return PathResolver(
        root,
        directories={"config": "config", "logs": "var/log", "models": "app/models"},
    )


@pytest.fixture
def strict_resolver(root: Path, memory_logger) -> PathResolver:
    return PathResolver(
        root,
        strict=True,
        directories={"config": "config", "logs": "var/log"},
        logger=memory_logger,
    )
