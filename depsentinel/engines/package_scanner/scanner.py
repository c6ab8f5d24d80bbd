"""PackageScanner — classify every target against one repository."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

import structlog

from depsentinel.config import ScanLimits
from depsentinel.engines.package_scanner.locator import discover_manifests, validate_repository
from depsentinel.engines.package_scanner.manifest import load_manifest, match_document
from depsentinel.engines.package_scanner.models import (
    Evidence,
    EvidenceKind,
    ManifestMatch,
    MatchClassification,
    PackageFinding,
    ScanResult,
    TargetSpec,
)
from depsentinel.engines.package_scanner.source import SourceUsageMatcher
from depsentinel.engines.package_scanner.version import classify_declared
from depsentinel.exceptions import ManifestParseError, ManifestReadError, OperationTimeout

log = structlog.get_logger("depsentinel.scanner")


def utc_timestamp(now: datetime | None = None) -> str:
    """Format *now* (default: current time) as ``YYYY-MM-DDTHH:MM:SSZ``."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def scan(
    repo_path: str | os.PathLike[str],
    targets: Iterable[TargetSpec] | None = None,
    limits: ScanLimits | None = None,
) -> ScanResult:
    """Scan a local repository for the configured targets."""
    return PackageScanner(limits).scan(repo_path, targets)


class PackageScanner:
    """Drive manifest and source matching over a list of targets.

    Each target is classified independently; output follows the order of
    the input targets regardless of ``limits.workers``.
    """

    def __init__(self, limits: ScanLimits | None = None) -> None:
        self.limits = limits or ScanLimits()

    def scan(
        self,
        repo_path: str | os.PathLike[str],
        targets: Iterable[TargetSpec] | None = None,
    ) -> ScanResult:
        """Run a full scan.

        Raises :class:`~depsentinel.exceptions.InvalidRepository` before any
        work if *repo_path* is not a readable directory.  Per-file problems
        never abort the scan.
        """
        root = validate_repository(repo_path)
        if targets is None:
            from depsentinel.targets import TARGETS

            targets = TARGETS
        target_list = list(targets)
        timestamp = utc_timestamp()

        log.info("scanner.start", repository=str(root), targets=len(target_list))

        manifests = discover_manifests(root, self.limits.max_manifests)
        if not manifests:
            log.warning("scanner.no_manifests", repository=str(root))
        else:
            log.info("scanner.manifests_located", count=len(manifests))

        documents = self._load_documents(manifests[: self.limits.max_manifests_per_package])
        source_matcher = SourceUsageMatcher(root, self.limits)
        source_matcher.prepare()

        # Compute every finding first, then partition in input order.
        if self.limits.workers > 1 and len(target_list) > 1:
            with ThreadPoolExecutor(max_workers=self.limits.workers) as pool:
                outcomes = list(
                    pool.map(lambda t: self._classify(t, documents, source_matcher), target_list)
                )
        else:
            outcomes = [self._classify(t, documents, source_matcher) for t in target_list]

        found = tuple(o for o in outcomes if o.classification.is_found)
        not_found = tuple(o.target for o in outcomes if not o.classification.is_found)

        log.info(
            "scanner.complete",
            repository=str(root),
            found=len(found),
            not_found=len(not_found),
        )
        return ScanResult(
            repository=str(root),
            timestamp=timestamp,
            total_checked=len(target_list),
            found=found,
            not_found=not_found,
        )

    def _load_documents(self, manifests: list[Path]) -> list[tuple[Path, Any]]:
        """Decode the manifests inspected per target; failures are dropped."""
        documents: list[tuple[Path, Any]] = []
        for path in manifests:
            try:
                document = load_manifest(
                    path, self.limits.file_timeout, self.limits.max_manifest_bytes
                )
                documents.append((path, document))
            except (ManifestReadError, ManifestParseError, OperationTimeout) as exc:
                log.debug("manifest.skipped", path=str(path), error=str(exc))
        return documents

    def _classify(
        self,
        target: TargetSpec,
        documents: list[tuple[Path, Any]],
        source_matcher: SourceUsageMatcher,
    ) -> PackageFinding:
        log.debug("scanner.check_target", spec=target.spec)

        manifest_match = self._match_manifests(target, documents)
        evidence: list[Evidence] = []
        classification = MatchClassification.NOT_FOUND

        if manifest_match is not None:
            classification = classify_declared(manifest_match.declared_version, target.version)
            evidence.append(_manifest_evidence(target, manifest_match, classification))

        usage = source_matcher.find_usage(target.name)
        if usage is not None:
            if manifest_match is None:
                classification = MatchClassification.SOURCE_ONLY_MATCH
                note = (
                    f"Found usage in source code ({usage.name}) but not in package.json"
                    " - possible transitive dependency"
                )
            else:
                note = f"Also confirmed usage in source code ({usage.name})"
            evidence.append(Evidence(kind=EvidenceKind.SOURCE, note=note, path=str(usage)))

        if classification.is_found:
            log.info(
                "scanner.target_found",
                spec=target.spec,
                classification=classification.value,
            )
        else:
            log.debug("scanner.target_not_found", spec=target.spec)

        return PackageFinding(
            target=target,
            classification=classification,
            evidence=tuple(evidence),
            manifest=manifest_match,
        )

    @staticmethod
    def _match_manifests(
        target: TargetSpec, documents: list[tuple[Path, Any]]
    ) -> ManifestMatch | None:
        """First manifest (in locator order) declaring the target wins."""
        if not target.version:
            return None
        for path, document in documents:
            match = match_document(document, target.name, str(path))
            if match is not None:
                return match
        return None


def _manifest_evidence(
    target: TargetSpec, match: ManifestMatch, classification: MatchClassification
) -> Evidence:
    filename = Path(match.path).name
    section = match.section.value
    if classification is MatchClassification.EXACT_VERSION_MATCH:
        note = f"EXACT VERSION MATCH in {filename} ({section}: {match.declared_version})"
    else:
        note = (
            f"DIFFERENT VERSION in {filename} ({section}: {match.declared_version},"
            f" expected: {target.version})"
        )
    return Evidence(kind=EvidenceKind.MANIFEST, note=note, path=match.path)
