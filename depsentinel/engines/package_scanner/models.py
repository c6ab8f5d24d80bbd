"""Data models for the package scanner engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class TargetSpec:
    """A package name and the exact version being looked for."""

    name: str
    version: str  # empty when the configured spec carried no version

    @property
    def spec(self) -> str:
        return f"{self.name}@{self.version}" if self.version else self.name

    def __str__(self) -> str:
        return self.spec


class DependencySection(Enum):
    """package.json dependency sections, in precedence order."""

    DEPENDENCIES = "dependencies"
    DEV_DEPENDENCIES = "devDependencies"
    PEER_DEPENDENCIES = "peerDependencies"
    OPTIONAL_DEPENDENCIES = "optionalDependencies"


class MatchClassification(Enum):
    """Outcome for one target in one scan."""

    EXACT_VERSION_MATCH = "exact_version_match"
    VERSION_MISMATCH = "version_mismatch"
    SOURCE_ONLY_MATCH = "source_only_match"
    NOT_FOUND = "not_found"

    @property
    def is_found(self) -> bool:
        return self is not MatchClassification.NOT_FOUND


class EvidenceKind(Enum):
    MANIFEST = "manifest"
    SOURCE = "source"


@dataclass(frozen=True)
class ManifestMatch:
    """The first dependency section of one manifest that declares a package."""

    path: str
    section: DependencySection
    declared_version: str


@dataclass(frozen=True)
class Evidence:
    """One human-readable note backing a classification."""

    kind: EvidenceKind
    note: str
    path: str | None = None


@dataclass(frozen=True)
class PackageFinding:
    """A target that was found, with how and why."""

    target: TargetSpec
    classification: MatchClassification
    evidence: tuple[Evidence, ...]
    manifest: ManifestMatch | None = None


@dataclass(frozen=True)
class ScanResult:
    """Result of one full scan, built once by the orchestrator."""

    repository: str
    timestamp: str  # ISO-8601 UTC, second precision, ``Z`` suffix
    total_checked: int
    found: tuple[PackageFinding, ...] = field(default_factory=tuple)
    not_found: tuple[TargetSpec, ...] = field(default_factory=tuple)

    @property
    def has_findings(self) -> bool:
        return bool(self.found)
