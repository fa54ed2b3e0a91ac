"""
Host Status Agent - Errors

Failures that stop a collector from obtaining its source. Parse problems in
output that was obtained are never raised; extractors fall back to zero values.
"""

from typing import Optional


class CollectorError(Exception):
    """Base class for collection failures that reach the caller."""

    kind = "collector_error"

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source
        self.message = message

    def to_dict(self) -> dict:
        return {
            "detail": str(self),
            "source": self.source,
            "kind": self.kind,
        }


class SourceUnavailableError(CollectorError):
    """A pseudo-file or binary could not be used at all."""

    kind = "source_unavailable"


class SourceMissingError(SourceUnavailableError):
    """Path does not exist."""


class SourceUnreadableError(SourceUnavailableError):
    """Path exists but reading it failed (permissions etc.)."""


class CommandLaunchError(SourceUnavailableError):
    """Binary not found or not executable."""


class CommandTimeoutError(CollectorError):
    """External process exceeded its wall-clock bound and was killed."""

    kind = "timeout"

    def __init__(self, source: str, timeout: float):
        super().__init__(source, f"timed out after {timeout:g}s")
        self.timeout = timeout


class CommandFailedError(CollectorError):
    """External process ran and exited non-zero."""

    kind = "execution_failed"

    def __init__(self, source: str, exit_code: int, stderr: Optional[str] = None):
        stderr = (stderr or "").strip()
        message = f"exited with status {exit_code}"
        if stderr:
            message = f"{message}: {stderr}"
        super().__init__(source, message)
        self.exit_code = exit_code
        self.stderr = stderr
