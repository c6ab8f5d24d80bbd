"""Bounded-time, bounded-size file reads.

A read runs on a daemon thread so that a stalled filesystem (FIFO, hung
network mount, symlink loop) costs at most ``timeout`` seconds.  The stuck
thread is abandoned rather than joined; with *max_bytes* set it can never
buffer more than ``max_bytes + 1`` bytes.
"""

from __future__ import annotations

import threading
from pathlib import Path

from depsentinel.exceptions import OperationTimeout


def _read(path: Path, max_bytes: int | None) -> bytes:
    if max_bytes is None:
        return path.read_bytes()
    # One byte past the cap lets callers tell "exactly at" from "over".
    with path.open("rb") as fh:
        return fh.read(max_bytes + 1)


def read_bytes(
    path: Path, timeout: float | None = None, max_bytes: int | None = None
) -> bytes:
    """Read *path*, raising :class:`OperationTimeout` past *timeout*.

    With *max_bytes* at most ``max_bytes + 1`` bytes are read, so a result
    longer than *max_bytes* means the file is over the cap.  ``OSError``
    from the read propagates unchanged.  A *timeout* of ``None`` or ``<= 0``
    reads inline.
    """
    if not timeout or timeout <= 0:
        return _read(path, max_bytes)

    outcome: dict[str, object] = {}

    def _worker() -> None:
        try:
            outcome["data"] = _read(path, max_bytes)
        except OSError as exc:
            outcome["error"] = exc

    worker = threading.Thread(target=_worker, name=f"read:{path.name}", daemon=True)
    worker.start()
    worker.join(timeout)
    if worker.is_alive():
        raise OperationTimeout(str(path), timeout)
    if "error" in outcome:
        raise outcome["error"]  # type: ignore[misc]
    return outcome["data"]  # type: ignore[return-value]
