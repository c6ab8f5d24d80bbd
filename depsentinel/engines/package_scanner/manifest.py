"""Manifest matcher — look a package up in a package.json's dependency sections."""

from __future__ import annotations

import importlib
import json
from pathlib import Path
from typing import Any

import structlog

from depsentinel.core.fileio import read_bytes
from depsentinel.engines.package_scanner.models import DependencySection, ManifestMatch
from depsentinel.exceptions import (
    ManifestParseError,
    ManifestReadError,
    MissingCapability,
    OperationTimeout,
)

log = structlog.get_logger("depsentinel.manifest")

_JSON_DECODER = "json.decoder"


def load_manifest(
    path: Path, timeout: float | None = None, max_bytes: int | None = None
) -> Any:
    """Read and decode a manifest.

    Files larger than *max_bytes* are rejected without being read in full.
    Raises :class:`ManifestReadError`, :class:`ManifestParseError` or
    :class:`OperationTimeout`; all three are per-file conditions.
    """
    try:
        raw = read_bytes(path, timeout, max_bytes=max_bytes)
    except OSError as exc:
        raise ManifestReadError(f"Cannot read {path}: {exc}") from exc
    if max_bytes is not None and len(raw) > max_bytes:
        raise ManifestReadError(f"{path} exceeds {max_bytes} bytes")
    try:
        return json.loads(raw.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ManifestParseError(f"Invalid JSON in {path}: {exc}") from exc


def match_document(document: Any, package_name: str, path: str = "") -> ManifestMatch | None:
    """Return the first section of *document* declaring *package_name*.

    Sections are checked in :class:`DependencySection` order.  A key whose
    value is null, empty, or not a string counts as absent from that section;
    numbers and booleans are not coerced to version strings.
    Any shape other than an object of objects yields ``None``.
    """
    if not isinstance(document, dict):
        return None
    for section in DependencySection:
        entries = document.get(section.value)
        if not isinstance(entries, dict):
            continue
        declared = entries.get(package_name)
        if isinstance(declared, str) and declared:
            return ManifestMatch(path=path, section=section, declared_version=declared)
    return None


def match_manifest_file(
    path: Path,
    package_name: str,
    timeout: float | None = None,
    max_bytes: int | None = None,
) -> ManifestMatch | None:
    """Load *path* and match *package_name*; unreadable files match nothing."""
    try:
        document = load_manifest(path, timeout, max_bytes)
    except (ManifestReadError, ManifestParseError, OperationTimeout) as exc:
        log.debug("manifest.skipped", path=str(path), error=str(exc))
        return None
    return match_document(document, package_name, str(path))


def ensure_capabilities() -> None:
    """Fail fast if the JSON decoder cannot be loaded."""
    try:
        importlib.import_module(_JSON_DECODER)
    except ImportError as exc:
        raise MissingCapability(
            f"{_JSON_DECODER} is required but not available; cannot parse package.json"
        ) from exc
