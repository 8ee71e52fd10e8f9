"""Pagination helpers for the upstream REST API.

Pure functions: response unwrapping, termination predicates and the
id cursor. Kept apart from the HTTP client so each rule is testable on
its own.
"""

from collections.abc import Mapping
from typing import Any

from taskboard.core.constants import LIST_WRAPPER_KEYS
from taskboard.shared.utils.records import as_int, pick_field

_ID_FIELDS = ("ID", "id", "Id")


def extract_items(response: Any) -> list[dict[str, Any]]:
    """Return the record list from a list-method result.

    The result is either the list itself or an object wrapping it under
    one of LIST_WRAPPER_KEYS (probed in order). Anything else yields [].
    """
    if isinstance(response, list):
        return response
    if isinstance(response, Mapping):
        for key in LIST_WRAPPER_KEYS:
            wrapped = response.get(key)
            if isinstance(wrapped, list):
                return wrapped
    return []


def is_last_offset_page(
    page_len: int,
    page_size: int,
    accumulated: int,
    total: int | None,
) -> bool:
    """Return True when offset pagination has nothing more to fetch.

    A short page always ends the walk. When the first (counting) page
    reported a total, reaching it ends the walk without an extra empty
    request.
    """
    if page_len < page_size:
        return True
    return total is not None and accumulated >= total


def record_id(record: Mapping[str, Any]) -> int | None:
    """Return the numeric identifier of an upstream record, if any."""
    return as_int(pick_field(record, *_ID_FIELDS))


def next_cursor(page: list[dict[str, Any]]) -> int | None:
    """Return the id cursor after page: the largest identifier seen in it.

    Returns None when the last record of the page has no usable
    identifier; callers treat that as fatal for the listing.
    """
    if not page or record_id(page[-1]) is None:
        return None
    return max(i for i in (record_id(r) for r in page) if i is not None)
