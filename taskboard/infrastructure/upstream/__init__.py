"""Upstream project-management REST API: HTTP client and pagination rules."""

from taskboard.infrastructure.upstream.client import UpstreamClient, encode_query
from taskboard.infrastructure.upstream.pagination import (
    extract_items,
    is_last_offset_page,
    next_cursor,
    record_id,
)

__all__ = [
    "UpstreamClient",
    "encode_query",
    "extract_items",
    "is_last_offset_page",
    "next_cursor",
    "record_id",
]
