"""Correlation ID middleware.

Forwards X-Correlation-ID from the client, or falls back to the request
id, so a dashboard load can be followed across services. Raw ASGI.
"""

import uuid
from typing import Callable

from taskboard.middleware._headers import get_header, with_header


def CorrelationIDMiddleware(
    app: Callable, header_name: str = "X-Correlation-ID"
) -> Callable:
    """Add or forward the correlation id; request_id on scope state is the fallback."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        correlation_id = (
            get_header(scope, header_name)
            or scope.get("state", {}).get("request_id")
            or str(uuid.uuid4())
        )
        scope.setdefault("state", {})["correlation_id"] = correlation_id

        async def send_wrapper(message: dict) -> None:
            await send(with_header(message, header_name, correlation_id))

        await app(scope, receive, send_wrapper)

    return asgi_app
