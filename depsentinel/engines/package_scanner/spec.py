"""Split ``name@version`` target specs."""

from __future__ import annotations

from depsentinel.engines.package_scanner.models import TargetSpec


def parse_spec(raw: str) -> TargetSpec:
    """Parse ``name@version`` on the last ``@``.

    Scoped names keep their leading ``@``: ``@scope/pkg@1.0.0`` parses to
    ``("@scope/pkg", "1.0.0")``.  Without a separating ``@`` the whole string
    is the name and the version is empty.
    """
    raw = raw.strip()
    name, sep, version = raw.rpartition("@")
    if not sep or not name:
        # No "@", or only a scope marker at position 0 ("@scope/pkg").
        return TargetSpec(name=raw, version="")
    return TargetSpec(name=name, version=version)
