"""Manifest locator — find package.json files under a repository root."""

from __future__ import annotations

import os
from pathlib import Path

import structlog

from depsentinel.exceptions import InvalidRepository

log = structlog.get_logger("depsentinel.locator")

MANIFEST_NAME = "package.json"

# Installed trees hold correct-but-irrelevant copies of every dependency.
EXCLUDED_DIRS = frozenset({"node_modules"})


def validate_repository(root: str | os.PathLike[str]) -> Path:
    """Return the resolved root, or raise :class:`InvalidRepository`."""
    path = Path(root)
    if not path.exists():
        raise InvalidRepository(str(root), "Repository path does not exist")
    if not path.is_dir():
        raise InvalidRepository(str(root), "Repository path is not a directory")
    if not os.access(path, os.R_OK | os.X_OK):
        raise InvalidRepository(str(root), "Cannot read repository path")
    return path.resolve()


def walk_files(root: Path):
    """Yield ``(dirpath, filenames)`` in lexical order, pruning excluded dirs."""
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in EXCLUDED_DIRS)
        yield Path(dirpath), sorted(filenames)


def discover_manifests(root: Path, limit: int = 50) -> list[Path]:
    """Walk *root* and return up to *limit* ``package.json`` files.

    Order is a depth-first walk with sorted directory entries, so repeated
    runs over the same tree return the same list.  An empty list is a
    normal outcome.
    """
    matches: list[Path] = []
    if limit <= 0:
        return matches
    for dirpath, filenames in walk_files(root):
        if MANIFEST_NAME in filenames:
            candidate = dirpath / MANIFEST_NAME
            if candidate.is_file():
                matches.append(candidate)
                if len(matches) >= limit:
                    log.info("locator.limit_reached", limit=limit)
                    break
    return matches
