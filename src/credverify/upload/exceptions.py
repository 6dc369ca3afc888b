"""Exception taxonomy for the credential upload workflow.

Every error the workflow can surface derives from
:class:`CredentialUploadError`, so view code can catch a single type and
print ``str(exc)`` as the user-facing message.
"""

from __future__ import annotations


class CredentialUploadError(Exception):
    """Base class for all upload workflow errors."""


class SizeLimitExceededError(CredentialUploadError):
    """Raised when a selected file is larger than the configured ceiling."""

    def __init__(self, file_name: str, size: int, limit: int) -> None:
        self.file_name = file_name
        self.size = size
        self.limit = limit
        super().__init__(
            f"File size exceeds {limit // (1024 * 1024)}MB limit "
            f"({file_name}: {size} bytes)"
        )


class InvalidStateError(CredentialUploadError):
    """Raised when an operation is not legal in the current workflow state."""

    def __init__(self, operation: str, state: str) -> None:
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot {operation} while workflow is {state}")


class CatalogUnavailableError(CredentialUploadError):
    """Raised when the supported-format catalog cannot be fetched or decoded."""


class TransferRejectedError(CredentialUploadError):
    """Raised when the backend answers with a structured error."""

    def __init__(self, server_message: str, status_code: int | None = None) -> None:
        self.server_message = server_message
        self.status_code = status_code
        super().__init__(server_message)


class TransferFailedError(CredentialUploadError):
    """Raised on network-level failure (connect, timeout, protocol)."""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"Upload failed: {cause}" if str(cause) else "Upload failed")


class MalformedResponseError(CredentialUploadError):
    """Raised when a 2xx body cannot be decoded into the expected payload."""
