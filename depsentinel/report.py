"""Render scan results as JSON or human-readable text."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import click

from depsentinel.engines.package_scanner.models import (
    MatchClassification,
    ScanResult,
    TargetSpec,
)

BANNER = "======================================"
TITLE = "NPM Package Scan Results"

_LABELS: dict[MatchClassification, tuple[str, str]] = {
    MatchClassification.EXACT_VERSION_MATCH: ("EXACT VERSION MATCH", "green"),
    MatchClassification.VERSION_MISMATCH: ("DIFFERENT VERSION", "yellow"),
    MatchClassification.SOURCE_ONLY_MATCH: ("SOURCE REFERENCE ONLY", "yellow"),
}


def _entry(target: TargetSpec) -> dict[str, str]:
    return {"name": target.name, "spec": target.spec}


def to_document(result: ScanResult) -> dict:
    """Build the JSON report document; key order is part of the format."""
    return {
        "repository": result.repository,
        "scan_timestamp": result.timestamp,
        "total_packages_checked": result.total_checked,
        "found_packages": [_entry(f.target) for f in result.found],
        "not_found_packages": [_entry(t) for t in result.not_found],
    }


def render_json(result: ScanResult) -> str:
    return json.dumps(to_document(result), indent=2, ensure_ascii=False)


def _scan_date(timestamp: str) -> str:
    try:
        parsed = datetime.strptime(timestamp, "%Y-%m-%dT%H:%M:%SZ")
    except ValueError:
        return timestamp
    return parsed.replace(tzinfo=timezone.utc).strftime("%a %b %d %H:%M:%S UTC %Y")


def render_text(result: ScanResult, verbose: bool = False, color: bool = False) -> str:
    """Human-readable report.  *verbose* adds each finding's evidence notes."""

    def style(text: str, fg: str) -> str:
        return click.style(text, fg=fg) if color else text

    lines = [
        "",
        BANNER,
        TITLE,
        BANNER,
        f"Repository: {result.repository}",
        f"Scan Date: {_scan_date(result.timestamp)}",
        f"Total Packages Checked: {result.total_checked}",
        "",
    ]

    if result.found:
        lines.append(style(f"FOUND PACKAGES ({len(result.found)}):", "green"))
        for finding in result.found:
            label, fg = _LABELS[finding.classification]
            lines.append(style(f"✓ {finding.target.spec} ({label})", fg))
            if verbose:
                lines.extend(f"  {e.note}" for e in finding.evidence)
        lines.append("")

    if result.not_found:
        lines.append(style(f"NOT FOUND PACKAGES ({len(result.not_found)}):", "yellow"))
        lines.extend(f"✗ {target.spec}" for target in result.not_found)
        lines.append("")

    lines.append(BANNER)
    return "\n".join(lines)


def exit_code(result: ScanResult) -> int:
    """0 when anything was found, 1 otherwise."""
    return 0 if result.has_findings else 1
