"""Exceptions raised along the generate pipeline, each mapped to an HTTP status."""

from typing import Optional


class GiveTypstError(Exception):
    """
    Base exception for every failure the service reports to a caller.

    The string form is exactly what ends up in the HTTP response body, so
    messages are kept short and human-readable.

    Attributes:
        message: Error description
        key: Bucket key involved in the failure, if any
        original_error: The underlying exception, if any
        context: Operation prefix added by the orchestrator (e.g. "failed to fetch data")
        status_code: HTTP status used when this error reaches the API layer
    """

    status_code = 500

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.key = key
        self.original_error = original_error
        self.context: Optional[str] = None
        super().__init__(message)

    def add_context(self, context: str) -> "GiveTypstError":
        """Prefix the message with the failing operation and return self for re-raising."""
        self.context = context
        return self

    def __str__(self) -> str:
        if self.context:
            return f"{self.context}: {self.message}"
        return self.message


class ValidationError(GiveTypstError):
    """Raised when the request body is malformed or contradicts itself."""

    status_code = 400


class StorageError(GiveTypstError):
    """Raised when the bucket cannot be read."""


class StorageUnavailableError(StorageError):
    """Raised when the bucket cannot be opened at all."""


class ObjectNotFoundError(StorageError):
    """Raised when a key does not exist or cannot be opened for reading."""


class DataFormatError(GiveTypstError):
    """Raised when fetched data is not a valid JSON object."""


class DataMarshalError(DataFormatError):
    """Raised when resolved data cannot be serialized back to JSON for the compiler."""


class CompileError(GiveTypstError):
    """
    Raised when the typst compiler rejects the source or crashes.

    Attributes:
        output: Raw compiler diagnostics (stdout and stderr), kept verbatim
    """

    def __init__(self, message: str, output: str = "", original_error: Optional[Exception] = None):
        self.output = output
        super().__init__(message, original_error=original_error)


class ResourceError(GiveTypstError):
    """Raised when the temporary workspace cannot be created, written, or read."""


class UnhealthyError(GiveTypstError):
    """Raised by the health check when a dependency is missing or unreachable."""

    status_code = 503
