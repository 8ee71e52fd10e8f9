"""Domain exceptions for the Taskboard application.

Defines the error taxonomy of the dashboard pipeline. These exceptions
are independent of the transport; the presentation layer maps them to
HTTP responses in exception handlers, or to a single error frame on the
streaming endpoint.
"""

from typing import Any


class TaskboardException(Exception):
    """Base exception for all Taskboard application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context.
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error body for this exception."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationException(TaskboardException):
    """Raised when the upstream endpoint or department name is missing or malformed."""

    def __init__(self, message: str, setting: str | None = None) -> None:
        """Initialize with message and optional setting name.

        Args:
            message: Description of the configuration problem.
            setting: Optional name of the offending setting.
        """
        details = {"setting": setting} if setting else {}
        super().__init__(message, "CONFIGURATION_ERROR", details)


class DepartmentNotFoundException(TaskboardException):
    """Raised when no department in the tree matches the configured name."""

    def __init__(self, name: str) -> None:
        """Initialize with the department name that was looked up.

        Args:
            name: Exact (case-sensitive) department name.
        """
        super().__init__(
            f'Department "{name}" not found',
            "DEPARTMENT_NOT_FOUND",
            {"department_name": name},
        )


class ChunkAssemblyException(TaskboardException):
    """Raised on the receiving side when a chunked payload cannot be reassembled."""

    def __init__(self, reason: str, **details: Any) -> None:
        """Initialize with the reason reassembly failed.

        Args:
            reason: Short description (missing chunk, size mismatch, bad JSON).
            **details: Extra context (e.g. missing indices).
        """
        super().__init__(
            f"Data assembly error: {reason}",
            "CHUNK_ASSEMBLY_ERROR",
            {"reason": reason, **details},
        )


class StreamClosedError(TaskboardException):
    """Raised when a frame is emitted after the stream reached a terminal state."""

    def __init__(self, state: str) -> None:
        super().__init__(
            f"Stream already closed ({state})",
            "STREAM_CLOSED",
            {"state": state},
        )


class StreamFailedException(TaskboardException):
    """Raised on the receiving side when the stream reports an error or ends early."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "STREAM_FAILED")
