"""Source file access for codetrack.

A file accessor turns an opaque source locator into the payload bytes. Access
is acquired for the duration of a single read and released afterwards.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Protocol

from errors import AccessDeniedError, SourceNotFoundError
from utils.logging_config import get_logger, log_with_context

# Initialize logger
logger = get_logger()


class FileAccessor(Protocol):
    def resolve(self, locator: str) -> bytes:
        """Return the bytes behind ``locator``.

        Raises:
            AccessDeniedError: If reading is not permitted
            SourceNotFoundError: If nothing readable exists at the locator
        """
        ...


class LocalFileAccessor:
    """Reads tracking files from the local filesystem, read-only."""

    @contextmanager
    def _scoped_access(self, locator: str) -> Iterator[Path]:
        path = Path(locator).expanduser()
        log_with_context(logger, "DEBUG", "Acquired source access", path=str(path))
        try:
            yield path
        finally:
            log_with_context(logger, "DEBUG", "Released source access", path=str(path))

    def resolve(self, locator: str) -> bytes:
        with self._scoped_access(locator) as path:
            try:
                return path.read_bytes()
            except PermissionError as e:
                raise AccessDeniedError(locator, f"Permission denied: {path}") from e
            except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
                raise SourceNotFoundError(locator, f"Source file not found: {path}") from e
