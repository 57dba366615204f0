"""HTTP request/response logging middleware."""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()

SSE_MEDIA_TYPE = "text/event-stream"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per HTTP request.

    Plain requests are logged as ``http_request`` with their full latency.
    Progress streams return before the research round ends, so they are
    logged as ``sse_stream_opened`` with the time until headers only; the
    round itself is logged by ResearchService.
    """

    SKIP_PATHS: frozenset[str] = frozenset(
        {"/health", "/docs", "/openapi.json", "/redoc"}
    )

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.SKIP_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = int((time.perf_counter() - start) * 1000)

        if response.headers.get("content-type", "").startswith(SSE_MEDIA_TYPE):
            logger.info(
                "sse_stream_opened",
                path=request.url.path,
                status_code=response.status_code,
                headers_ms=elapsed_ms,
            )
        else:
            logger.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                latency_ms=elapsed_ms,
            )
        return response
