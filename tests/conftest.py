"""Shared pytest fixtures for depsentinel tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import structlog


@pytest.fixture(autouse=True)
def _stdlib_structlog():
    """Route structlog through stdlib logging so output lands on stderr/caplog."""
    structlog.reset_defaults()
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


def write_manifest(directory: Path, **sections: dict) -> Path:
    """Write a package.json with the given dependency sections."""
    directory.mkdir(parents=True, exist_ok=True)
    document = {"name": directory.name, "version": "1.0.0", **sections}
    path = directory / "package.json"
    path.write_text(json.dumps(document, indent=2))
    return path


def write_source(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    root = tmp_path / "repo"
    root.mkdir()
    return root
