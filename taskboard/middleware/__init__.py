"""HTTP middleware: timeout, request ID, correlation ID.

Applied in main app; order matters (last added = outermost).
"""

from taskboard.middleware.correlation_id import CorrelationIDMiddleware
from taskboard.middleware.request_id import RequestIDMiddleware
from taskboard.middleware.timeout import TimeoutMiddleware

__all__ = [
    "CorrelationIDMiddleware",
    "RequestIDMiddleware",
    "TimeoutMiddleware",
]
