"""Error types raised by codetrack.

Per-source errors (payload, access) are recovered inside a sync pass. Pass-level
errors (``SyncError`` subclasses) are reported back to the caller of the pass.
"""

from constants import ERROR_ALL_SOURCES_FAILED


class CodeTrackError(Exception):
    """Base class for all codetrack errors."""


class MalformedPayloadError(CodeTrackError, ValueError):
    """Raised when a tracking payload is not valid JSON or misses required fields."""


class SourceAccessError(CodeTrackError):
    """Raised when a data source cannot be read."""

    def __init__(self, locator: str, message: str = "") -> None:
        self.locator = locator
        super().__init__(message or f"Cannot read source: {locator}")


class AccessDeniedError(SourceAccessError):
    """The source exists but reading it is not permitted."""


class SourceNotFoundError(SourceAccessError):
    """The source locator does not point at a readable file."""


class SyncError(CodeTrackError):
    """Base class for errors that abort a whole sync pass."""


class NoEnabledSourcesError(SyncError):
    pass


class AllSourcesFailedError(SyncError):
    def __init__(self, failures: dict[str, str]) -> None:
        self.failures = failures
        super().__init__(f"{ERROR_ALL_SOURCES_FAILED} ({len(failures)} failed)")


class PublishFailedError(SyncError):
    pass
