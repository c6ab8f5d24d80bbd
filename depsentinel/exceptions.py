"""Custom exceptions for depsentinel."""


class SentinelError(Exception):
    """Base exception for all depsentinel errors."""

    fatal = False


class InvalidRepository(SentinelError):
    """Raised when the repository path is missing, not a directory, or unreadable."""

    fatal = True

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{reason}: {path}")


class MissingCapability(SentinelError):
    """Raised when a required parsing capability is unavailable."""

    fatal = True


class ManifestReadError(SentinelError):
    """Raised when a manifest file cannot be read."""


class ManifestParseError(SentinelError):
    """Raised when a manifest file does not contain valid JSON."""


class SourceReadError(SentinelError):
    """Raised when a source file is unreadable, oversized, or binary."""


class OperationTimeout(SentinelError):
    """Raised when a single file operation exceeds its time budget."""

    def __init__(self, path: str, timeout: float):
        self.path = path
        self.timeout = timeout
        super().__init__(f"Timed out after {timeout}s reading {path}")
