"""Progress channel: ordered server-to-client SSE stream for one request.

Wire framing per record (UTF-8)::

    event: <name>\\n
    data: <compact JSON>\\n
    \\n

The producer writes events as they happen; each record is handed to the
consumer immediately. There is no backpressure. A terminal event
(``complete`` or ``error``) closes the channel.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

import structlog

from eachie.errors import ChannelClosedError
from eachie.research.schemas import TERMINAL_EVENTS, ProgressEvent

logger = structlog.get_logger()


def encode_event(event: ProgressEvent) -> bytes:
    """Encode one event as a named SSE record."""
    data = event.model_dump_json(by_alias=True, exclude_none=True)
    return f"event: {event.event}\ndata: {data}\n\n".encode()


class ProgressChannel:
    """Single-producer, single-consumer event stream.

    ``send`` never suspends, so emitting from inside a completing task
    preserves the order in which calls actually finished.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[bytes | None] = asyncio.Queue()
        self._closed = False
        self.sent: list[str] = []

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, event: ProgressEvent) -> None:
        """Write one event; terminal events close the channel.

        Raises:
            ChannelClosedError: if the channel is already closed.
        """
        if self._closed:
            raise ChannelClosedError(
                f"Cannot send '{event.event}': progress channel is closed"
            )
        self._queue.put_nowait(encode_event(event))
        self.sent.append(event.event)
        if event.event in TERMINAL_EVENTS:
            self.close()

    def close(self) -> None:
        """Close the channel; repeated calls are no-ops."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(None)
        logger.debug("progress_channel_closed", events=len(self.sent))

    async def __aiter__(self) -> AsyncIterator[bytes]:
        while True:
            record = await self._queue.get()
            if record is None:
                return
            yield record
