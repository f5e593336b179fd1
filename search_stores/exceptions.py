"""
Exceptions for search store operations.

Every error carries a ``kind`` so callers can tell "not found" from
"try again later" from "gave up waiting" without probing ad hoc fields,
plus the upstream HTTP status code when the service supplied one.
"""

from enum import Enum

TRANSIENT_STATUS_CODES = frozenset({429, 500, 503})


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    TRANSIENT = "transient"
    TIMEOUT = "timeout"
    VALIDATION = "validation"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


class FileSearchError(Exception):
    """Base exception for all search store operations."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def is_transient(self) -> bool:
        return self.kind is ErrorKind.TRANSIENT or self.status_code in TRANSIENT_STATUS_CODES


class NotFoundError(FileSearchError):
    """A store or document could not be found."""

    kind = ErrorKind.NOT_FOUND


class StoreNotFoundError(NotFoundError):
    """No store with the requested display name exists."""

    pass


class DocumentNotFoundError(NotFoundError):
    """No document with the requested display name exists in the store."""

    pass


class TransientError(FileSearchError):
    """Upstream is rate limiting or temporarily unavailable."""

    kind = ErrorKind.TRANSIENT


class OperationTimeoutError(FileSearchError):
    """Polling budget exhausted before the operation reported done."""

    kind = ErrorKind.TIMEOUT


class OperationCancelledError(FileSearchError):
    """Polling was abandoned because the caller cancelled it."""

    kind = ErrorKind.CANCELLED


class InvalidRequestError(FileSearchError):
    """Caller-supplied input is missing or malformed."""

    kind = ErrorKind.VALIDATION


class MissingApiKeyError(InvalidRequestError):
    """No API key was supplied for an upstream call."""

    def __init__(self, message: str = "An API key is required for search store operations."):
        super().__init__(message, status_code=401)


class BackendError(FileSearchError):
    """Backend-specific error."""

    def __init__(self, message: str, backend: str, *, status_code: int | None = None):
        self.backend = backend
        super().__init__(f"[{backend}] {message}", status_code=status_code)


class DocumentUploadError(BackendError):
    """Upload finished but the indexing operation reported a failure."""

    pass


class ConfigurationError(FileSearchError):
    """Configuration or initialization error."""

    pass


class BackendNotFoundError(ConfigurationError):
    """Requested backend is not registered."""

    pass


def upstream_error(message: str, status_code: int | None, backend: str) -> FileSearchError:
    """Build the exception matching an upstream HTTP status code."""
    text = f"[{backend}] {message}"
    if status_code in TRANSIENT_STATUS_CODES:
        return TransientError(text, status_code=status_code)
    if status_code == 404:
        return NotFoundError(text, status_code=status_code)
    if status_code == 400:
        return InvalidRequestError(text, status_code=status_code)
    return BackendError(message, backend, status_code=status_code)
