"""Model registry: research models, synthesizers, pricing, defaults.

Loaded from config/models.yaml at startup, validated by Pydantic.
Adding a model or changing a price = YAML edit, no code changes.

The registry is immutable after loading and is injected into
ResearchService and CostEstimator rather than read as a global.
"""

from enum import StrEnum
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, model_validator

logger = structlog.get_logger()


class ReasoningMode(StrEnum):
    """Reasoning configuration for thinking models."""

    NONE = "none"
    LOW = "low"
    HIGH = "high"
    ENABLED = "enabled"


class TokenRate(BaseModel):
    """Cost per million tokens in USD."""

    model_config = ConfigDict(frozen=True)

    input: float
    output: float


class ModelSpec(BaseModel):
    """Static descriptor of one research model."""

    model_config = ConfigDict(frozen=True)

    model_id: str = ""  # populated from dict key during validation
    name: str
    provider: str
    description: str = ""
    supports_vision: bool = False
    # The gateway parses PDFs for every model unless told otherwise.
    supports_documents: bool = True
    reasoning: ReasoningMode = ReasoningMode.NONE
    blended_cost: float = 0.0  # per 1M tokens, 3:1 output:input

    def provider_options(self) -> dict[str, Any]:
        """Reasoning settings in OpenRouter request-body form."""
        if self.reasoning == ReasoningMode.ENABLED:
            return {"reasoning": {"enabled": True}}
        if self.reasoning in (ReasoningMode.LOW, ReasoningMode.HIGH):
            return {"reasoning": {"effort": str(self.reasoning)}}
        return {}


class SynthesizerSpec(BaseModel):
    """Model available for synthesizing responses."""

    model_config = ConfigDict(frozen=True)

    model_id: str = ""
    name: str
    description: str = ""
    blended_cost: float = 0.0


class ModelRegistryConfig(BaseModel):
    """Top-level registry.

    Validates that:
    - Every default model exists in models section
    - The default synthesizer exists in synthesizers section
    - Every pricing entry has non-negative rates
    """

    model_config = ConfigDict(frozen=True)

    models: dict[str, ModelSpec]
    synthesizers: dict[str, SynthesizerSpec]
    pricing: dict[str, TokenRate] = {}
    default_models: list[str]
    default_synthesizer: str

    @model_validator(mode="before")
    @classmethod
    def populate_ids(cls, data: Any) -> Any:
        """Copy dict keys into model_id fields (specs are frozen afterwards)."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for section in ("models", "synthesizers"):
            entries = data.get(section)
            if isinstance(entries, dict):
                data[section] = {
                    key: {**value, "model_id": key} if isinstance(value, dict) else value
                    for key, value in entries.items()
                }
        return data

    @model_validator(mode="after")
    def validate_references(self) -> "ModelRegistryConfig":
        errors: list[str] = []

        for model_id in self.default_models:
            if model_id not in self.models:
                errors.append(f"Default model references unknown model: '{model_id}'")

        if self.default_synthesizer not in self.synthesizers:
            errors.append(
                "Default synthesizer references unknown synthesizer: "
                f"'{self.default_synthesizer}'"
            )

        for model_id, rate in self.pricing.items():
            if rate.input < 0 or rate.output < 0:
                errors.append(f"Pricing for '{model_id}' has negative rate")

        if errors:
            raise ValueError(
                "Model registry validation failed:\n"
                + "\n".join(f"  - {e}" for e in errors)
            )
        return self

    def resolve_models(self, model_ids: list[str], limit: int) -> list[ModelSpec]:
        """Resolve requested ids to specs.

        Empty selection falls back to ``default_models``. Unknown ids are
        dropped silently, duplicates keep their first position, and the
        result is truncated to ``limit``.
        """
        ids = model_ids or self.default_models
        resolved: list[ModelSpec] = []
        seen: set[str] = set()
        for model_id in ids:
            spec = self.models.get(model_id)
            if spec is None or model_id in seen:
                continue
            seen.add(model_id)
            resolved.append(spec)

        if len(resolved) > limit:
            logger.warning(
                "model_selection_truncated",
                requested=len(resolved),
                limit=limit,
            )
            resolved = resolved[:limit]
        return resolved

    def get_rate(self, model_id: str) -> TokenRate | None:
        return self.pricing.get(model_id)

    def synthesizer_name(self, model_id: str) -> str:
        """Display name of a synthesizer; unknown ids are shown as-is."""
        spec = self.synthesizers.get(model_id)
        return spec.name if spec else model_id


def load_registry(config_path: Path) -> ModelRegistryConfig:
    """Load and validate model registry from YAML.

    Args:
        config_path: Path to models.yaml. Typically comes from
            Settings.model_registry_path.

    Raises:
        FileNotFoundError: if YAML file doesn't exist.
        ValueError: if YAML parsing or validation fails.
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Registry config not found: {config_path}")

    try:
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse registry config '{config_path}': {e}") from e
    return ModelRegistryConfig.model_validate(raw)
