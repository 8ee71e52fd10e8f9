"""Shared telemetry: logging setup, OpenTelemetry tracing and span helpers."""

from taskboard.shared.telemetry.logging import (
    RequestIdFilter,
    request_id_var,
    setup_logging,
)
from taskboard.shared.telemetry.tracing import add_span_attributes, traced

__all__ = [
    "setup_logging",
    "RequestIdFilter",
    "request_id_var",
    "traced",
    "add_span_attributes",
]
