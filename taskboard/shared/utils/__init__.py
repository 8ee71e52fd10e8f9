"""Shared utilities: UTC datetimes and upstream record field access."""

from taskboard.shared.utils.datetime import (
    ensure_utc,
    parse_datetime,
    to_iso,
    utc_now,
    whole_days_between,
)
from taskboard.shared.utils.records import (
    as_bool,
    as_int,
    as_str,
    as_str_list,
    pick_field,
)

__all__ = [
    "as_bool",
    "as_int",
    "as_str",
    "as_str_list",
    "ensure_utc",
    "parse_datetime",
    "pick_field",
    "to_iso",
    "utc_now",
    "whole_days_between",
]
