"""Package scanner engine — find flagged npm packages in a repository."""

from depsentinel.engines.package_scanner.models import (
    DependencySection,
    Evidence,
    EvidenceKind,
    ManifestMatch,
    MatchClassification,
    PackageFinding,
    ScanResult,
    TargetSpec,
)
from depsentinel.engines.package_scanner.scanner import PackageScanner, scan

__all__ = [
    "DependencySection",
    "Evidence",
    "EvidenceKind",
    "ManifestMatch",
    "MatchClassification",
    "PackageFinding",
    "PackageScanner",
    "ScanResult",
    "TargetSpec",
    "scan",
]
