"""Research API endpoints.

Routes
------
- ``POST /research``         -- Run a round, return the AggregateResult
- ``POST /research/stream``  -- Run a round, stream progress as SSE
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse, StreamingResponse

from eachie.api.deps import get_research_service
from eachie.config import Settings, get_settings
from eachie.errors import ResearchConfigError, SynthesisError
from eachie.llm.errors import ErrorCode
from eachie.research.channel import ProgressChannel
from eachie.research.schemas import ErrorEvent, ResearchRequest
from eachie.research.service import ResearchService

logger = structlog.get_logger()

router = APIRouter(tags=["research"])

ServiceDep = Annotated[ResearchService, Depends(get_research_service)]
SettingsDep = Annotated[Settings, Depends(get_settings)]

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.post("/research")
async def run_research(
    body: ResearchRequest,
    service: ServiceDep,
    settings: SettingsDep,
) -> JSONResponse:
    """Run one research round and return the aggregate result.

    Raises:
        HTTPException 400: empty query, no credential, or no valid models.
        HTTPException 502: synthesis failed upstream.
        HTTPException 504: the request deadline expired.
    """
    deadline = settings.request_deadline_seconds
    try:
        async with asyncio.timeout(deadline):
            result = await service.run(body)
    except TimeoutError as exc:
        logger.warning("research_deadline_exceeded", deadline_s=deadline)
        raise HTTPException(
            status_code=504, detail=f"Research timed out after {deadline:.0f}s"
        ) from exc
    except ResearchConfigError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except SynthesisError as exc:
        logger.error("synthesis_failed", model=exc.model_id, error=str(exc))
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return JSONResponse(
        content=result.model_dump(mode="json", by_alias=True, exclude_none=True)
    )


async def _produce(
    service: ResearchService,
    body: ResearchRequest,
    channel: ProgressChannel,
    deadline: float,
) -> None:
    """Drive one streamed round under the overall request deadline."""
    try:
        async with asyncio.timeout(deadline):
            await service.stream(body, channel)
    except TimeoutError:
        logger.warning("research_deadline_exceeded", deadline_s=deadline)
        if not channel.closed:
            channel.send(
                ErrorEvent(
                    message=f"Research timed out after {deadline:.0f}s",
                    code=ErrorCode.TIMEOUT,
                )
            )
    finally:
        channel.close()


@router.post("/research/stream")
async def stream_research(
    body: ResearchRequest,
    service: ServiceDep,
    settings: SettingsDep,
) -> StreamingResponse:
    """Run one research round, streaming progress events.

    Events: ``model_complete`` per settled call, ``synthesis_start``,
    then exactly one of ``complete`` or ``error``.
    """
    deadline = settings.request_deadline_seconds

    async def event_stream() -> AsyncIterator[bytes]:
        channel = ProgressChannel()
        producer = asyncio.create_task(_produce(service, body, channel, deadline))
        try:
            async for record in channel:
                yield record
            await producer
        finally:
            if not producer.done():
                # client disconnected
                producer.cancel()

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
