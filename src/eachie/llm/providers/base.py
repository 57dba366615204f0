"""Abstract LLM provider interface."""

import abc
import time

from eachie.llm.schemas import LLMRequest, LLMResponse


class LLMProvider(abc.ABC):
    """Base class for upstream providers.

    One call in, one response out. Failures are raised as whatever the
    underlying SDK raises; callers classify them from the message text.
    """

    provider_name: str = ""

    @abc.abstractmethod
    async def complete(self, request: LLMRequest) -> LLMResponse:
        """Generate text completion."""
        ...

    def _measure_latency(self) -> "_LatencyTimer":
        """Context manager for measuring call latency."""
        return _LatencyTimer()


class _LatencyTimer:
    """Simple latency measurement helper."""

    def __init__(self) -> None:
        self.start: float = 0
        self.elapsed_ms: int = 0

    def __enter__(self) -> "_LatencyTimer":
        self.start = time.perf_counter()
        return self

    def __exit__(self, *args: object) -> None:
        self.elapsed_ms = int((time.perf_counter() - self.start) * 1000)
