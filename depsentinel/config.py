"""Scan limits — bounds on traversal and per-file cost."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields

import structlog

log = structlog.get_logger("depsentinel.config")

# field name -> environment variable
_ENV_VARS: dict[str, str] = {
    "max_manifests": "DEPSENTINEL_MAX_MANIFESTS",
    "max_manifests_per_package": "DEPSENTINEL_MAX_MANIFESTS_PER_PACKAGE",
    "max_source_files_per_extension": "DEPSENTINEL_MAX_SOURCE_FILES",
    "max_source_bytes": "DEPSENTINEL_MAX_SOURCE_BYTES",
    "max_manifest_bytes": "DEPSENTINEL_MAX_MANIFEST_BYTES",
    "file_timeout": "DEPSENTINEL_FILE_TIMEOUT",
    "workers": "DEPSENTINEL_WORKERS",
}


@dataclass(frozen=True)
class ScanLimits:
    """Bounds applied by the scan orchestrator.

    Attributes:
        max_manifests: cap on ``package.json`` files returned by discovery.
        max_manifests_per_package: how many of those are inspected per target.
        max_source_files_per_extension: source files read per extension.
        max_source_bytes: larger source files are skipped.
        max_manifest_bytes: larger manifests are skipped.
        file_timeout: seconds allowed for a single file read; ``<= 0`` disables it.
        workers: number of targets scanned concurrently.
    """

    max_manifests: int = 50
    max_manifests_per_package: int = 10
    max_source_files_per_extension: int = 100
    max_source_bytes: int = 2 * 1024 * 1024
    max_manifest_bytes: int = 2 * 1024 * 1024
    file_timeout: float = 5.0
    workers: int = 1

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> ScanLimits:
        """Build limits from ``DEPSENTINEL_*`` environment variables.

        Invalid or non-positive values are ignored with a warning.
        """
        env = os.environ if environ is None else environ
        overrides: dict[str, int | float] = {}
        for f in fields(cls):
            var = _ENV_VARS[f.name]
            raw = env.get(var)
            if raw is None or raw == "":
                continue
            cast = float if f.type in ("float", float) else int
            try:
                value = cast(raw)
            except ValueError:
                log.warning("config.invalid_value", variable=var, value=raw)
                continue
            if value <= 0 and f.name != "file_timeout":
                log.warning("config.invalid_value", variable=var, value=raw)
                continue
            overrides[f.name] = value
        return cls(**overrides)
