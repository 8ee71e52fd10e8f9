"""Dashboard API: aggregated task backlog as one JSON body or as a server-push stream."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse

from taskboard.api.streaming import StreamChannel
from taskboard.api.v1.dependencies import get_app_settings, get_dashboard_use_case
from taskboard.application.use_cases import BuildDashboardUseCase
from taskboard.core.config import Settings
from taskboard.core.constants import STREAM_MEDIA_TYPE
from taskboard.core.limiter import limit_dashboard

router = APIRouter()

_STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    # Disable proxy buffering (nginx) so frames reach the client as emitted
    "X-Accel-Buffering": "no",
}


@router.get("/tasks")
@limit_dashboard
async def get_dashboard_tasks(
    request: Request,
    use_case: Annotated[BuildDashboardUseCase, Depends(get_dashboard_use_case)],
    refresh: Annotated[bool, Query(description="Bypass the cached result")] = False,
) -> dict[str, Any]:
    """Return the full dashboard result. Errors map to non-2xx JSON bodies."""
    result = await use_case.execute(force_refresh=refresh)
    return result.to_dict()


@router.get("/tasks/stream")
@limit_dashboard
async def stream_dashboard_tasks(
    request: Request,
    use_case: Annotated[BuildDashboardUseCase, Depends(get_dashboard_use_case)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    refresh: Annotated[bool, Query(description="Bypass the cached result")] = False,
) -> StreamingResponse:
    """Stream progress frames, then the result (inline or chunked), as text/event-stream.

    Pipeline failures become a single error frame; configuration errors are
    rejected with 400 before the stream opens.
    """
    channel = StreamChannel.from_settings(settings)

    async def produce(ch: StreamChannel) -> None:
        result = await use_case.execute(force_refresh=refresh, progress=ch.progress)
        await ch.complete(result.to_dict())

    return StreamingResponse(
        channel.run(produce),
        media_type=STREAM_MEDIA_TYPE,
        headers=_STREAM_HEADERS,
    )
