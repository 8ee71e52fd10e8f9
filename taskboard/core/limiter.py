"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules can use the
same instance without circular imports. Limit strings come from
settings and are read per request.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from taskboard.core.config import get_settings

limiter = Limiter(key_func=get_remote_address)


def _dashboard_limit() -> str:
    return get_settings().dashboard_rate_limit


def _verify_limit() -> str:
    return get_settings().verify_rate_limit


# Every dashboard request may trigger a full upstream pipeline run
limit_dashboard = limiter.limit(_dashboard_limit)
limit_verify = limiter.limit(_verify_limit)
