"""Domain-specific exceptions for eachie."""

from __future__ import annotations


class ResearchConfigError(Exception):
    """Request cannot start: nothing is dispatched."""


class MissingCredentialError(ResearchConfigError):
    """Neither a caller key nor a usable server key is available."""

    def __init__(self) -> None:
        super().__init__(
            "API key required. Please add your OpenRouter key in Settings."
        )


class NoValidModelsError(ResearchConfigError):
    """None of the requested model ids resolved against the registry."""

    def __init__(self) -> None:
        super().__init__("No valid models selected")


class SynthesisError(Exception):
    """The synthesizer call failed after at least one model succeeded."""

    def __init__(self, model_id: str, cause: Exception) -> None:
        self.model_id = model_id
        super().__init__(str(cause) or f"Synthesis with {model_id} failed")
        self.__cause__ = cause


class ChannelClosedError(Exception):
    """An event was sent to a progress channel that is already closed."""
