"""Source usage matcher — lexical search for require/import of a package."""

from __future__ import annotations

import re
import threading
from pathlib import Path

import structlog

from depsentinel.config import ScanLimits
from depsentinel.core.fileio import read_bytes
from depsentinel.engines.package_scanner.locator import walk_files
from depsentinel.exceptions import OperationTimeout, SourceReadError

log = structlog.get_logger("depsentinel.source")

SOURCE_EXTENSIONS: tuple[str, ...] = (".js", ".ts", ".jsx", ".tsx", ".mjs")

# {name} is the escaped package name.  The closing quote must repeat the
# opening one, so the name has to be the whole module specifier.
_PATTERN_TEMPLATES = (
    r"\brequire\s*\(\s*(?P<{q}>['\"]){name}(?P={q})",
    r"\bimport\s+[^;'\"()]*?\bfrom\s*(?P<{q}>['\"]){name}(?P={q})",
    r"\bimport\s*\(\s*(?P<{q}>['\"]){name}(?P={q})\s*\)",
)


def usage_pattern(package_name: str) -> re.Pattern[str]:
    """Compile the combined require/import/dynamic-import pattern for a name."""
    escaped = re.escape(package_name)
    alternatives = [
        template.format(name=escaped, q=f"q{index}")
        for index, template in enumerate(_PATTERN_TEMPLATES)
    ]
    return re.compile("|".join(f"(?:{alt})" for alt in alternatives))


def decode_source(path: Path, data: bytes, max_bytes: int) -> str:
    """Decode a source file, raising :class:`SourceReadError` for oversized or binary data."""
    if len(data) > max_bytes:
        raise SourceReadError(f"{path} exceeds {max_bytes} bytes")
    if b"\x00" in data:
        raise SourceReadError(f"{path} looks binary")
    return data.decode("utf-8", errors="replace")


class SourceUsageMatcher:
    """Search JavaScript/TypeScript sources under a root for package references.

    Candidate files are enumerated once (``node_modules`` excluded, at most
    ``max_source_files_per_extension`` per extension) and their text is
    cached for the life of the matcher, so one instance serves every target
    of a scan.
    """

    def __init__(self, root: Path, limits: ScanLimits | None = None) -> None:
        self._root = root
        self._limits = limits or ScanLimits()
        self._lock = threading.Lock()
        self._texts: list[tuple[Path, str]] | None = None

    def candidate_files(self) -> list[Path]:
        cap = self._limits.max_source_files_per_extension
        per_ext: dict[str, list[Path]] = {ext: [] for ext in SOURCE_EXTENSIONS}
        for dirpath, filenames in walk_files(self._root):
            for filename in filenames:
                bucket = per_ext.get(Path(filename).suffix)
                if bucket is not None and len(bucket) < cap:
                    bucket.append(dirpath / filename)
            if all(len(bucket) >= cap for bucket in per_ext.values()):
                break
        return [path for ext in SOURCE_EXTENSIONS for path in per_ext[ext]]

    def prepare(self) -> None:
        """Enumerate and read candidate files; idempotent and thread-safe."""
        with self._lock:
            if self._texts is not None:
                return
            texts: list[tuple[Path, str]] = []
            for path in self.candidate_files():
                try:
                    texts.append((path, self._read(path)))
                except (SourceReadError, OperationTimeout) as exc:
                    log.debug("source.skipped", path=str(path), error=str(exc))
            self._texts = texts
            log.info("source.files_loaded", count=len(texts))

    def _read(self, path: Path) -> str:
        try:
            data = read_bytes(
                path, self._limits.file_timeout, max_bytes=self._limits.max_source_bytes
            )
        except OSError as exc:
            raise SourceReadError(f"Cannot read {path}: {exc}") from exc
        return decode_source(path, data, self._limits.max_source_bytes)

    def find_usage(self, package_name: str) -> Path | None:
        """Return the first file referencing *package_name*, or None."""
        if not package_name:
            return None
        self.prepare()
        pattern = usage_pattern(package_name)
        for path, text in self._texts or ():
            if pattern.search(text):
                return path
        return None

    def uses(self, package_name: str) -> bool:
        return self.find_usage(package_name) is not None
