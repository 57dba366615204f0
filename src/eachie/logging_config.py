"""Structured logging configuration.

JSON in production, colored console elsewhere. Credentials are redacted
and upstream error text is clipped before rendering.
Call configure_logging() once, from the FastAPI lifespan.
"""

import logging
import sys

import structlog

# Caller keys, the shared OpenRouter key and the Slack webhook URL.
SENSITIVE_KEYS: frozenset[str] = frozenset(
    {"api_key", "authorization", "secret", "token", "webhook_url"}
)

# Gateway errors sometimes carry whole HTML pages.
CLIPPED_KEYS: frozenset[str] = frozenset({"error", "alert", "reason"})
MAX_VALUE_CHARS = 500


def _redact_sensitive_keys(
    logger: logging.Logger,
    method_name: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    for key in event_dict:
        if key.lower() in SENSITIVE_KEYS:
            event_dict[key] = "***REDACTED***"
    return event_dict


def _clip_upstream_text(
    logger: logging.Logger,
    method_name: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    for key in CLIPPED_KEYS & event_dict.keys():
        value = event_dict[key]
        if isinstance(value, str) and len(value) > MAX_VALUE_CHARS:
            event_dict[key] = f"{value[:MAX_VALUE_CHARS]}... [{len(value)} chars]"
    return event_dict


def configure_logging(
    environment: str = "development",
    log_level: str = "INFO",
) -> None:
    """Install the structlog chain and route it through the stdlib root logger.

    Args:
        environment: 'production' for JSON lines, anything else for the
            console renderer.
        log_level: Root level name (DEBUG, INFO, WARNING, ...).
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,  # research_id
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        _redact_sensitive_keys,
        _clip_upstream_text,
    ]

    if environment == "production":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
        shared_processors.append(structlog.processors.format_exc_info)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level.upper())

    # SDK and transport chatter; upstream calls are logged by eachie itself.
    for name in ("uvicorn.access", "httpx", "httpcore", "openai"):
        logging.getLogger(name).setLevel(logging.WARNING)
