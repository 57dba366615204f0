"""FastAPI application with lifespan management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from eachie.api.middleware import RequestLoggingMiddleware
from eachie.api.routes.models import router as models_router
from eachie.api.routes.research import router as research_router
from eachie.config import settings
from eachie.llm import create_provider_factory, load_registry
from eachie.logging_config import configure_logging
from eachie.pricing import CostEstimator
from eachie.research.alerts import SlackWebhookNotifier
from eachie.research.service import ResearchService

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown.

    Startup:
        - Load and validate the model registry.
        - Open one shared HTTP client for billing lookups, alerts and
          upstream calls.
        - Build the ResearchService.
    Shutdown:
        - Close the shared HTTP client.
    """
    configure_logging(
        environment=str(settings.environment),
        log_level=settings.log_level,
    )
    registry = load_registry(settings.model_registry_path)

    async with httpx.AsyncClient() as http_client:
        estimator = CostEstimator(
            registry,
            http_client,
            billing_base_url=settings.openrouter_base_url,
            timeout=settings.billing_lookup_timeout_seconds,
        )
        webhook = settings.slack_webhook_url
        notifier = SlackWebhookNotifier(
            webhook.get_secret_value() if webhook is not None else None,
            http_client,
        )
        app.state.registry = registry
        app.state.research_service = ResearchService(
            registry,
            settings,
            create_provider_factory(settings, http_client),
            estimator,
            notifier,
        )

        logger.info(
            "app_started",
            environment=str(settings.environment),
            model_count=len(registry.models),
            shared_key=settings.openrouter_api_key is not None,
        )
        yield

    logger.info("app_stopped")


app = FastAPI(
    title="Eachie",
    description="Multi-model research with a synthesized answer",
    version="0.1.0",
    lifespan=lifespan,
    debug=settings.is_dev,
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allowed_methods,
    allow_headers=settings.cors_allowed_headers,
)


@app.get("/health")
async def health(request: Request) -> JSONResponse:
    """Liveness check; reports how many research models are registered."""
    registry = getattr(request.app.state, "registry", None)
    status = "ok" if registry is not None else "starting"
    return JSONResponse(
        status_code=200 if registry is not None else 503,
        content={
            "status": status,
            "models": len(registry.models) if registry is not None else 0,
            "timestamp": datetime.now(UTC).isoformat(timespec="seconds"),
        },
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Catch-all handler for unhandled exceptions."""
    logger.error("unhandled_exception", exc_info=exc, path=request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


app.include_router(models_router, prefix="/api")
app.include_router(research_router, prefix="/api")
