"""Logging configuration for the service."""

import logging
import sys
from contextvars import ContextVar

from taskboard.core.config import get_settings

# Set by the request id middleware for the duration of a request
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

# Third-party loggers that log every request at INFO
_NOISY_LOGGERS = ("httpx", "httpcore")


class RequestIdFilter(logging.Filter):
    """Copy the current request id onto each record as record.request_id."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


def setup_logging() -> None:
    """Configure service-wide logging.

    Level is DEBUG when settings.debug is True, otherwise INFO. Output
    goes to stdout. HTTP client request logs are raised to WARNING unless
    debugging, since every upstream page would otherwise produce a line.
    """
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIdFilter())
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
        handlers=[handler],
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(log_level if settings.debug else logging.WARNING)
