"""Operational alerts sent without blocking the research flow.

Alerts run as detached tasks: the caller never awaits them, and any
failure is logged and dropped.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

import httpx
import structlog

logger = structlog.get_logger()

# Strong references so detached tasks are not garbage-collected mid-flight.
_background_tasks: set[asyncio.Task[None]] = set()


class AlertNotifier(Protocol):
    async def notify(self, message: str) -> None: ...


class SlackWebhookNotifier:
    """Post ``{"text": message}`` to a Slack incoming webhook."""

    def __init__(
        self,
        webhook_url: str | None,
        http_client: httpx.AsyncClient,
        *,
        timeout: float = 10.0,
    ) -> None:
        self._webhook_url = webhook_url
        self._http_client = http_client
        self._timeout = timeout

    async def notify(self, message: str) -> None:
        if not self._webhook_url:
            logger.warning("slack_webhook_not_configured", alert=message)
            return
        response = await self._http_client.post(
            self._webhook_url,
            json={"text": message},
            timeout=self._timeout,
        )
        response.raise_for_status()


async def _deliver(notifier: AlertNotifier, message: str) -> None:
    try:
        await notifier.notify(message)
    except Exception:
        logger.error("alert_delivery_failed", alert=message, exc_info=True)
    else:
        logger.info("alert_delivered", alert=message)


def fire_and_forget(notifier: AlertNotifier, message: str) -> asyncio.Task[None]:
    """Schedule an alert on the running loop and return immediately."""
    task = asyncio.create_task(_deliver(notifier, message))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task


class CreditExhaustionAlert:
    """One-shot alert for an exhausted shared gateway credential.

    Created per request; only the first trigger sends anything.
    """

    def __init__(self, notifier: AlertNotifier) -> None:
        self._notifier = notifier
        self._fired = False
        self.task: asyncio.Task[None] | None = None

    @property
    def fired(self) -> bool:
        return self._fired

    def trigger(self, model_id: str, error: str) -> None:
        if self._fired:
            return
        self._fired = True
        logger.warning("shared_credits_exhausted", model=model_id, error=error)
        self.task = fire_and_forget(
            self._notifier,
            "OpenRouter credits exhausted on the shared key "
            f"(model {model_id}): {error}",
        )
