"""Declared-version comparison against an exact flagged version."""

from __future__ import annotations

from depsentinel.engines.package_scanner.models import MatchClassification

# Literal declaration forms that pin or admit the flagged version.
_SATISFYING_PREFIXES = ("", "^", "~", ">=")


def version_matches(declared: str | None, expected: str) -> bool:
    """Return True if *declared* is one of ``V``, ``^V``, ``~V`` or ``>=V``.

    This is string comparison, not range evaluation: ``>=6.2.0`` does not
    match ``6.2.2``.  Missing or empty values on either side never match.
    """
    if not declared or not expected:
        return False
    return any(declared == prefix + expected for prefix in _SATISFYING_PREFIXES)


def classify_declared(declared: str, expected: str) -> MatchClassification:
    """Classify a non-empty declared version for a target."""
    if version_matches(declared, expected):
        return MatchClassification.EXACT_VERSION_MATCH
    return MatchClassification.VERSION_MISMATCH
