"""Async client for the upstream project-management REST API.

Every method is a POST to <base>/<method>.json with a JSON body; the
response envelope is {"result": ..., "total"?: int, "next"?: int} or
{"error": ..., "error_description": ...}. All HTTP calls use
httpx.AsyncClient so they do not block the event loop; the client is
shared (connection reuse) and owned by the application lifespan.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode

import httpx

from taskboard.application.interfaces import BatchResult
from taskboard.core.config import Settings
from taskboard.core.constants import METHOD_BATCH, METHOD_TASK_LIST, NO_COUNT_START
from taskboard.infrastructure.exceptions import (
    UpstreamException,
    UpstreamTimeoutException,
)
from taskboard.infrastructure.upstream.pagination import (
    extract_items,
    is_last_offset_page,
    next_cursor,
)
from taskboard.shared.telemetry.tracing import add_span_attributes, traced
from taskboard.shared.utils.records import as_int

logger = logging.getLogger(__name__)


def _flatten_params(prefix: str, value: Any, out: list[tuple[str, str]]) -> None:
    """Append (key, value) pairs for value using bracketed keys (a[b][0]=c)."""
    if isinstance(value, Mapping):
        for key, item in value.items():
            _flatten_params(f"{prefix}[{key}]" if prefix else str(key), item, out)
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            _flatten_params(f"{prefix}[{index}]", item, out)
    elif isinstance(value, bool):
        out.append((prefix, "1" if value else "0"))
    elif value is None:
        out.append((prefix, ""))
    else:
        out.append((prefix, str(value)))


def encode_query(params: Mapping[str, Any]) -> str:
    """Encode nested params as a query string, as batch sub-commands expect."""
    pairs: list[tuple[str, str]] = []
    _flatten_params("", params, pairs)
    return urlencode(pairs)


class UpstreamClient:
    """Client for the paged upstream API.

    Provides a single call, a batch call, and two pagination strategies:
    get_all() (offset pages with a safety ceiling) for users and other
    lists, and list_tasks() (ascending id cursor) for tasks, whose list
    method is used with counting disabled.
    """

    def __init__(
        self,
        base_url: str,
        http: httpx.AsyncClient,
        *,
        timeout_seconds: float = 30.0,
        page_size: int = 50,
        max_items: int = 10_000,
        max_task_pages: int = 100,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Upstream base URL (webhook URL including the token).
            http: Shared async HTTP client.
            timeout_seconds: Per-call timeout.
            page_size: Records per page for both pagination strategies.
            max_items: get_all() truncates beyond this many records.
            max_task_pages: list_tasks() stops after this many pages.
        """
        self.base_url = base_url.rstrip("/")
        self.http = http
        self.timeout_seconds = timeout_seconds
        self.page_size = page_size
        self.max_items = max_items
        self.max_task_pages = max_task_pages

    @classmethod
    def from_settings(cls, settings: Settings, http: httpx.AsyncClient) -> UpstreamClient:
        """Build a client from application settings."""
        return cls(
            settings.webhook_url,
            http,
            timeout_seconds=settings.upstream_timeout_seconds,
            page_size=settings.upstream_page_size,
            max_items=settings.upstream_max_items,
            max_task_pages=settings.task_list_max_iterations,
        )

    def _url(self, method: str) -> str:
        return f"{self.base_url}/{method}.json"

    @traced("upstream.call")
    async def call_raw(
        self, method: str, params: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        """Perform one call and return the full response envelope.

        Raises:
            UpstreamTimeoutException: The call exceeded timeout_seconds.
            UpstreamException: Transport error, non-2xx status, invalid JSON,
                or an API-level error in the envelope.
        """
        add_span_attributes(**{"upstream.method": method})
        try:
            resp = await self.http.post(
                self._url(method),
                json=dict(params or {}),
                timeout=self.timeout_seconds,
            )
        except httpx.TimeoutException as e:
            logger.warning("Upstream call %s timed out: %s", method, e)
            raise UpstreamTimeoutException(method, self.timeout_seconds) from e
        except httpx.HTTPError as e:
            logger.warning("Upstream call %s failed: %s", method, e)
            raise UpstreamException(method, str(e) or e.__class__.__name__) from e

        try:
            body = resp.json()
        except ValueError:
            body = None
        if resp.status_code >= 400:
            reason = resp.reason_phrase or "HTTP error"
            if isinstance(body, dict) and body.get("error"):
                reason = body.get("error_description") or str(body["error"])
            raise UpstreamException(method, reason, status_code=resp.status_code)
        if not isinstance(body, dict):
            raise UpstreamException(method, "response is not a JSON object", resp.status_code)
        if body.get("error"):
            raise UpstreamException(
                method,
                body.get("error_description") or str(body["error"]) or "Unknown error",
                status_code=resp.status_code,
            )
        return body

    async def call(self, method: str, params: Mapping[str, Any] | None = None) -> Any:
        """Perform one call and return the envelope's result."""
        body = await self.call_raw(method, params)
        return body.get("result")

    async def batch(
        self, commands: Mapping[str, tuple[str, Mapping[str, Any]]]
    ) -> BatchResult:
        """Run named (method, params) sub-requests in one round trip.

        Args:
            commands: Map of name -> (method, params).

        Returns:
            BatchResult with per-name results and per-name errors.
        """
        cmd = {
            name: f"{method}?{encode_query(params)}" if params else method
            for name, (method, params) in commands.items()
        }
        result = await self.call(METHOD_BATCH, {"halt": 0, "cmd": cmd})
        if not isinstance(result, Mapping):
            return BatchResult()
        results = result.get("result") or {}
        errors = result.get("result_error") or {}
        # Empty maps may arrive as [] from the upstream
        return BatchResult(
            results=dict(results) if isinstance(results, Mapping) else {},
            errors=dict(errors) if isinstance(errors, Mapping) else {},
        )

    @traced("upstream.get_all")
    async def get_all(
        self, method: str, params: Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Return every page of an offset-paginated list method, concatenated.

        The first request uses start=0 (and may report a total). Later
        requests deliberately do not always send the count-suppressing
        start=-1: they follow the offset the previous envelope announced
        in "next", and fall back to start=-1 only when none was announced.
        A bare -1 carries no position, so an upstream that honours it as
        "no count" alone would hand back the same page on every request.
        Stops on a short page, on reaching the reported total, or after
        max_items records (result truncated, logged).
        """
        base = dict(params or {})
        items: list[dict[str, Any]] = []
        total: int | None = None
        start = 0
        page_no = 0
        while True:
            body = await self.call_raw(
                method, {**base, "start": start, "limit": self.page_size}
            )
            page = extract_items(body.get("result"))
            if page_no == 0:
                total = as_int(body.get("total"))
            page_no += 1
            announced = as_int(body.get("next"))
            start = announced if announced is not None else NO_COUNT_START
            items.extend(page)
            if len(items) > self.max_items:
                logger.warning(
                    "%s returned more than %s items; truncating",
                    method,
                    self.max_items,
                )
                del items[self.max_items :]
                break
            if is_last_offset_page(len(page), self.page_size, len(items), total):
                break
        logger.debug("%s: %s items in %s pages", method, len(items), page_no)
        return items

    @traced("upstream.list_tasks")
    async def list_tasks(
        self,
        task_filter: Mapping[str, Any],
        select: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        """Return every task matching task_filter, walking an ascending id cursor.

        Each page is requested ordered by ID with ">ID" > cursor and
        counting disabled. Stops on an empty or short page, when the last
        record of a page has no id (logged; partial list returned), when
        the cursor fails to advance, or after max_task_pages pages.
        """
        tasks: list[dict[str, Any]] = []
        last_id = 0
        pages = 0
        while pages < self.max_task_pages:
            pages += 1
            page_filter = dict(task_filter)
            if last_id > 0:
                page_filter[">ID"] = last_id
            body = await self.call_raw(
                METHOD_TASK_LIST,
                {
                    "filter": page_filter,
                    "select": list(select or ["*"]),
                    "order": {"ID": "ASC"},
                    "limit": self.page_size,
                    "start": NO_COUNT_START,
                },
            )
            page = extract_items(body.get("result"))
            if not page:
                break
            tasks.extend(page)
            cursor = next_cursor(page)
            if cursor is None:
                logger.error(
                    "Task page %s: last record has no ID, stopping listing: %r",
                    pages,
                    page[-1],
                )
                break
            if cursor <= last_id:
                logger.error(
                    "Task cursor did not advance (%s -> %s), stopping listing",
                    last_id,
                    cursor,
                )
                break
            last_id = cursor
            if len(page) < self.page_size:
                break
        else:
            logger.warning(
                "Task listing hit the page cap (%s pages, %s tasks)",
                self.max_task_pages,
                len(tasks),
            )
        return tasks
