"""Span helpers for the pipeline's async stages.

traced() wraps a coroutine function in a span named after the stage.
Only allowlisted keyword arguments become span attributes: upstream
requests carry the webhook URL, and its path embeds the access token.
Without a configured tracer provider every span is a no-op.
"""

import inspect
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from functools import wraps
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

AttributeValue = str | int | float | bool

_tracer = trace.get_tracer("taskboard")

_RECORDED_KWARGS = frozenset({
    "method", "name", "force_refresh", "include_subdepartments", "department_id",
})


@contextmanager
def _stage_span(
    name: str,
    attributes: Mapping[str, AttributeValue] | None,
    kwargs: Mapping[str, Any],
) -> Iterator[trace.Span]:
    with _tracer.start_as_current_span(
        name, record_exception=False, set_status_on_exception=False
    ) as span:
        for key, value in (attributes or {}).items():
            span.set_attribute(key, value)
        for key, value in kwargs.items():
            if key in _RECORDED_KWARGS:
                span.set_attribute(f"arg.{key}", str(value))
        try:
            yield span
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise
        span.set_status(Status(StatusCode.OK))


def traced(
    operation_name: str | None = None,
    attributes: Mapping[str, AttributeValue] | None = None,
) -> Callable:
    """Decorate a coroutine function so each call runs in its own span.

    Args:
        operation_name: Span name; defaults to module.qualname.
        attributes: Static attributes set on every span.

    Raises:
        TypeError: func is not a coroutine function.
    """

    def decorator(func: Callable) -> Callable:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"traced() needs a coroutine function, got {func!r}")
        span_name = operation_name or f"{func.__module__}.{func.__qualname__}"

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            with _stage_span(span_name, attributes, kwargs):
                return await func(*args, **kwargs)

        return wrapper

    return decorator


def add_span_attributes(**attributes: AttributeValue) -> None:
    """Set attributes on the current span when it is recording."""
    span = trace.get_current_span()
    if span.is_recording():
        for key, value in attributes.items():
            span.set_attribute(key, value)
