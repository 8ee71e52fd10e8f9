"""Helpers for reading loosely-shaped upstream records.

Upstream records arrive with either UPPER_SNAKE or camelCase field names
(sometimes both). pick_field() applies the single precedence rule used
everywhere: the UPPER_SNAKE value wins when both are present and not None.
"""

from collections.abc import Mapping
from typing import Any

_TRUE_STRINGS = frozenset({"y", "yes", "true", "1"})
_FALSE_STRINGS = frozenset({"n", "no", "false", "0"})


def pick_field(record: Mapping[str, Any], *names: str, default: Any = None) -> Any:
    """Return the first non-None value among names, in the order given.

    Args:
        record: Raw upstream record.
        *names: Candidate field names, highest precedence first.
        default: Returned when no candidate is present.
    """
    for name in names:
        value = record.get(name)
        if value is not None:
            return value
    return default


def as_str(value: Any) -> str | None:
    """Return value as a stripped string; None and blank strings become None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def as_str_list(value: Any) -> tuple[str, ...]:
    """Return a tuple of strings from a list, a scalar, or a {key: value} mapping."""
    if value is None or value == "":
        return ()
    if isinstance(value, Mapping):
        value = list(value.values())
    if not isinstance(value, (list, tuple, set)):
        value = [value]
    return tuple(s for s in (as_str(v) for v in value) if s is not None)


def as_bool(value: Any, default: bool = True) -> bool:
    """Interpret booleans and "Y"/"N"-style strings; unknown values give default."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    return default


def as_int(value: Any) -> int | None:
    """Parse an integer identifier; None when absent or not numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None
