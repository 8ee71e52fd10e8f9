"""Infrastructure exceptions for upstream API operations.

Upstream errors extend TaskboardException so presentation can map them
to HTTP responses (or error frames) consistently. Timeouts are typed
separately so callers can report "request timed out" specifically.
"""

from typing import Any

from taskboard.domain.exceptions import TaskboardException


class UpstreamException(TaskboardException):
    """Upstream call failed (network, HTTP status or API-level error)."""

    def __init__(
        self,
        method: str,
        reason: str,
        status_code: int | None = None,
    ) -> None:
        details: dict[str, Any] = {"method": method, "reason": reason}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(
            f"Upstream call {method} failed: {reason}",
            "UPSTREAM_ERROR",
            details,
        )


class UpstreamTimeoutException(UpstreamException):
    """Upstream call exceeded the configured timeout."""

    def __init__(self, method: str, timeout_seconds: float) -> None:
        TaskboardException.__init__(
            self,
            f"Request {method} timed out after {timeout_seconds:g} seconds",
            "UPSTREAM_TIMEOUT",
            {"method": method, "timeout_seconds": timeout_seconds},
        )
