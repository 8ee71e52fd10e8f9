"""Cache key builders.

All keys use CACHE_KEY_SEP. The dashboard result lives under a single
fixed logical key; it is computed for one configured department per
process.
"""

from taskboard.core.constants import CACHE_KEY_SEP, CACHE_PREFIX_DASHBOARD


def dashboard_key() -> str:
    """Key for the aggregated dashboard result ("dashboard:tasks")."""
    return f"{CACHE_PREFIX_DASHBOARD}{CACHE_KEY_SEP}tasks"
