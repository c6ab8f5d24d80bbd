"""Tests for the scan orchestrator, including end-to-end scenarios."""

from __future__ import annotations

import re
from unittest.mock import patch

import pytest

from depsentinel.config import ScanLimits
from depsentinel.engines.package_scanner.models import (
    DependencySection,
    EvidenceKind,
    MatchClassification,
    TargetSpec,
)
from depsentinel.engines.package_scanner.scanner import PackageScanner, scan, utc_timestamp
from depsentinel.exceptions import InvalidRepository
from depsentinel.targets import TARGETS

from conftest import write_manifest, write_source


def _finding(result, name):
    for finding in result.found:
        if finding.target.name == name:
            return finding
    return None


def _not_found_names(result):
    return [t.name for t in result.not_found]


# ── end-to-end scenarios ─────────────────────────────────────────────────


class TestScenarios:
    def test_exact_version_declared(self, repo):
        write_manifest(repo, dependencies={"chalk": "5.6.1"})
        result = scan(repo)
        finding = _finding(result, "chalk")
        assert finding is not None
        assert finding.classification is MatchClassification.EXACT_VERSION_MATCH
        assert finding.manifest.section is DependencySection.DEPENDENCIES
        assert "EXACT VERSION MATCH" in finding.evidence[0].note

    def test_different_version_declared(self, repo):
        write_manifest(repo, dependencies={"chalk": "^5.0.0"})
        result = scan(repo, [TargetSpec("chalk", "5.6.1")])
        finding = _finding(result, "chalk")
        assert finding.classification is MatchClassification.VERSION_MISMATCH
        assert len(finding.evidence) == 1
        note = finding.evidence[0].note
        assert "DIFFERENT VERSION" in note
        assert "^5.0.0" in note
        assert "expected: 5.6.1" in note

    def test_source_only(self, repo):
        write_source(repo / "src" / "component.jsx", "import ansiRegex from 'ansi-regex';\n")
        result = scan(repo)
        finding = _finding(result, "ansi-regex")
        assert finding.classification is MatchClassification.SOURCE_ONLY_MATCH
        assert finding.target.spec == "ansi-regex@6.2.1"
        assert finding.manifest is None
        assert finding.evidence[0].kind is EvidenceKind.SOURCE
        assert "transitive" in finding.evidence[0].note

    def test_empty_repository(self, repo):
        result = scan(repo)
        assert result.found == ()
        assert list(result.not_found) == list(TARGETS)
        assert result.total_checked == 18
        assert result.has_findings is False


# ── classification rules ─────────────────────────────────────────────────


class TestClassification:
    def test_manifest_and_source_keep_manifest_classification(self, repo):
        write_manifest(repo, dependencies={"debug": "4.4.2"})
        write_source(repo / "index.js", "const debug = require('debug');\n")
        finding = _finding(scan(repo), "debug")
        assert finding.classification is MatchClassification.EXACT_VERSION_MATCH
        kinds = [e.kind for e in finding.evidence]
        assert kinds == [EvidenceKind.MANIFEST, EvidenceKind.SOURCE]
        assert "Also confirmed" in finding.evidence[1].note

    def test_mismatch_with_source_stays_mismatch(self, repo):
        write_manifest(repo, devDependencies={"debug": "~4.3.0"})
        write_source(repo / "index.ts", "import debug from 'debug';\n")
        finding = _finding(scan(repo), "debug")
        assert finding.classification is MatchClassification.VERSION_MISMATCH
        assert len(finding.evidence) == 2

    def test_first_manifest_wins(self, repo):
        write_manifest(repo / "a", dependencies={"chalk": "^4.0.0"})
        write_manifest(repo / "b", dependencies={"chalk": "5.6.1"})
        finding = _finding(scan(repo, [TargetSpec("chalk", "5.6.1")]), "chalk")
        assert finding.classification is MatchClassification.VERSION_MISMATCH
        assert finding.manifest.path.endswith("a/package.json")

    def test_manifest_without_match_falls_through_to_next(self, repo):
        write_manifest(repo / "a", dependencies={"react": "18.0.0"})
        write_manifest(repo / "b", dependencies={"chalk": "5.6.1"})
        finding = _finding(scan(repo, [TargetSpec("chalk", "5.6.1")]), "chalk")
        assert finding.classification is MatchClassification.EXACT_VERSION_MATCH

    def test_null_declaration_is_not_found(self, repo):
        write_manifest(repo, dependencies={"chalk": None})
        result = scan(repo, [TargetSpec("chalk", "5.6.1")])
        assert result.found == ()
        assert _not_found_names(result) == ["chalk"]

    def test_malformed_manifest_does_not_abort(self, repo):
        (repo / "a").mkdir()
        (repo / "a" / "package.json").write_text("{ broken")
        write_manifest(repo / "b", dependencies={"chalk": "5.6.1"})
        finding = _finding(scan(repo), "chalk")
        assert finding.classification is MatchClassification.EXACT_VERSION_MATCH

    def test_node_modules_manifests_ignored(self, repo):
        write_manifest(repo / "node_modules" / "x", dependencies={"chalk": "5.6.1"})
        result = scan(repo, [TargetSpec("chalk", "5.6.1")])
        assert result.found == ()

    def test_empty_version_never_uses_manifest(self, repo):
        write_manifest(repo, dependencies={"chalk": "5.6.1"})
        result = scan(repo, [TargetSpec("chalk", "")])
        assert result.found == ()

    def test_empty_version_can_be_source_only(self, repo):
        write_manifest(repo, dependencies={"chalk": "5.6.1"})
        write_source(repo / "index.js", "require('chalk')\n")
        finding = _finding(scan(repo, [TargetSpec("chalk", "")]), "chalk")
        assert finding.classification is MatchClassification.SOURCE_ONLY_MATCH

    def test_per_package_manifest_budget(self, repo):
        for i in range(3):
            write_manifest(repo / f"p{i}", dependencies={"react": "18.0.0"})
        write_manifest(repo / "p9", dependencies={"chalk": "5.6.1"})
        limits = ScanLimits(max_manifests_per_package=3)
        result = scan(repo, [TargetSpec("chalk", "5.6.1")], limits)
        assert result.found == ()

    def test_manifest_discovery_cap(self, repo):
        write_manifest(repo / "a", dependencies={"react": "18.0.0"})
        write_manifest(repo / "b", dependencies={"chalk": "5.6.1"})
        result = scan(repo, [TargetSpec("chalk", "5.6.1")], ScanLimits(max_manifests=1))
        assert result.found == ()

    def test_manifest_read_failure_is_skipped(self, repo):
        write_manifest(repo, dependencies={"chalk": "5.6.1"})
        with patch(
            "depsentinel.engines.package_scanner.manifest.read_bytes",
            side_effect=PermissionError("denied"),
        ):
            result = scan(repo, [TargetSpec("chalk", "5.6.1")], ScanLimits(file_timeout=0))
        assert result.found == ()

    def test_oversized_manifest_is_skipped(self, repo):
        write_manifest(repo, dependencies={"chalk": "5.6.1"}, description="x" * 4096)
        result = scan(repo, [TargetSpec("chalk", "5.6.1")], ScanLimits(max_manifest_bytes=1024))
        assert result.found == ()
        assert scan(repo, [TargetSpec("chalk", "5.6.1")]).found != ()


# ── result invariants ────────────────────────────────────────────────────


class TestResultInvariants:
    @pytest.fixture
    def mixed_repo(self, repo):
        write_manifest(repo, dependencies={"chalk": "5.6.1", "debug": "^4.0.0"})
        write_manifest(repo / "web", devDependencies={"color": "~5.0.1"})
        write_source(repo / "web" / "app.tsx", "import stripAnsi from 'strip-ansi';\n")
        write_source(repo / "lib.js", "const n = require('color-name');\n")
        return repo

    def test_partition(self, mixed_repo):
        result = scan(mixed_repo)
        found = [f.target for f in result.found]
        assert len(found) + len(result.not_found) == result.total_checked
        assert set(found).isdisjoint(result.not_found)
        assert set(found) | set(result.not_found) == set(TARGETS)

    def test_found_entries_carry_evidence(self, mixed_repo):
        for finding in scan(mixed_repo).found:
            assert finding.evidence

    def test_output_follows_configured_order(self, mixed_repo):
        result = scan(mixed_repo)
        order = {t: i for i, t in enumerate(TARGETS)}
        found_idx = [order[f.target] for f in result.found]
        not_found_idx = [order[t] for t in result.not_found]
        assert found_idx == sorted(found_idx)
        assert not_found_idx == sorted(not_found_idx)
        assert [f.target.name for f in result.found] == [
            "debug", "chalk", "strip-ansi", "color-name", "color",
        ]

    def test_idempotent(self, mixed_repo):
        first = scan(mixed_repo)
        second = scan(mixed_repo)
        assert first.found == second.found
        assert first.not_found == second.not_found

    def test_parallel_matches_sequential(self, mixed_repo):
        sequential = scan(mixed_repo)
        parallel = scan(mixed_repo, limits=ScanLimits(workers=4))
        assert parallel.found == sequential.found
        assert parallel.not_found == sequential.not_found

    def test_repository_is_resolved(self, mixed_repo):
        assert scan(str(mixed_repo)).repository == str(mixed_repo.resolve())

    def test_timestamp_format(self, repo):
        assert re.fullmatch(r"\d{4}-\d\d-\d\dT\d\d:\d\d:\d\dZ", scan(repo).timestamp)


class TestPreconditions:
    def test_missing_repository(self, tmp_path):
        with pytest.raises(InvalidRepository):
            PackageScanner().scan(tmp_path / "missing")

    def test_invalid_repository_checked_before_discovery(self, tmp_path):
        with patch(
            "depsentinel.engines.package_scanner.scanner.discover_manifests"
        ) as discover:
            with pytest.raises(InvalidRepository):
                scan(tmp_path / "missing")
        discover.assert_not_called()


class TestUtcTimestamp:
    def test_format(self):
        from datetime import datetime, timedelta, timezone

        moment = datetime(2025, 9, 10, 12, 30, 0, tzinfo=timezone(timedelta(hours=2)))
        assert utc_timestamp(moment) == "2025-09-10T10:30:00Z"
