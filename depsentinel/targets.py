"""Configured package list — the compromised releases to look for."""

from __future__ import annotations

from depsentinel.engines.package_scanner.models import TargetSpec
from depsentinel.engines.package_scanner.spec import parse_spec

# Releases published during the September 2025 npm account takeover.
PACKAGE_SPECS: tuple[str, ...] = (
    "ansi-styles@6.2.2",
    "debug@4.4.2",
    "chalk@5.6.1",
    "supports-color@10.2.1",
    "strip-ansi@7.1.1",
    "ansi-regex@6.2.1",
    "wrap-ansi@9.0.1",
    "color-convert@3.1.1",
    "color-name@2.0.1",
    "is-arrayish@0.3.3",
    "slice-ansi@7.1.1",
    "color@5.0.1",
    "color-string@2.1.1",
    "simple-swizzle@0.2.3",
    "supports-hyperlinks@4.1.1",
    "has-ansi@6.0.1",
    "chalk-template@1.1.1",
    "backslash@0.2.1",
)

TARGETS: tuple[TargetSpec, ...] = tuple(parse_spec(s) for s in PACKAGE_SPECS)
