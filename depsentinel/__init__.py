"""depsentinel: detect flagged npm package versions in a source repository."""

__version__ = "0.1.0"

from depsentinel.config import ScanLimits
from depsentinel.engines.package_scanner import (
    MatchClassification,
    PackageFinding,
    PackageScanner,
    ScanResult,
    TargetSpec,
    scan,
)
from depsentinel.exceptions import InvalidRepository, MissingCapability, SentinelError

__all__ = [
    "InvalidRepository",
    "MatchClassification",
    "MissingCapability",
    "PackageFinding",
    "PackageScanner",
    "ScanLimits",
    "ScanResult",
    "SentinelError",
    "TargetSpec",
    "scan",
]
