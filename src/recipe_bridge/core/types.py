"""core.types

Shared DTOs and enums used throughout *recipe_bridge*.

These models live in the **core** layer so that *adapters*, *services*, and
higher application layers can depend on them without causing circular imports.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator

from recipe_bridge.core.model_id import MODEL_ID_PATTERN

# ---------------------------------------------------------------------------
# Chat roles (OpenAI-style for broad compatibility)
# ---------------------------------------------------------------------------


class Role(StrEnum):
    system = 'system'
    user = 'user'
    assistant = 'assistant'


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class Message(BaseModel):
    """Single chat message."""

    role: Role
    content: str

    # Immutable value-object
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)


# ---------------------------------------------------------------------------
# Generation parameters
#   • Unknown knobs are rejected and values are never coerced or clamped
# ---------------------------------------------------------------------------


class ModelParams(BaseModel):
    """Sampling parameters forwarded to the model."""

    temperature: float = Field(0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(150, ge=1, le=4096, description='Maximum tokens in completion')
    top_p: float | None = Field(1.0, ge=0.0, le=1.0)
    frequency_penalty: float | None = Field(0.0, ge=-2.0, le=2.0)
    presence_penalty: float | None = Field(0.0, ge=-2.0, le=2.0)

    model_config = ConfigDict(frozen=True, extra='forbid', strict=True)

    def merged(self, overrides: Mapping[str, Any] | ModelParams | None = None) -> ModelParams:
        """Return a validated copy with *overrides* applied field by field."""
        if overrides is None:
            return self
        if isinstance(overrides, ModelParams):
            overrides = overrides.model_dump(exclude_unset=True)
        return ModelParams.model_validate({**self.model_dump(), **dict(overrides)})


class ProviderRouting(BaseModel):
    """Routing directive: never let the gateway swap in another backend."""

    allow_fallbacks: bool = False
    require_parameters: bool = True

    model_config = ConfigDict(frozen=True)


class RequestPayload(BaseModel):
    """Wire request for one chat-completion call. Built fresh per call."""

    model: str
    messages: tuple[Message, ...]
    params: ModelParams
    provider: ProviderRouting = Field(default_factory=ProviderRouting)

    model_config = ConfigDict(frozen=True)

    def to_wire(self) -> dict[str, Any]:
        """Render the JSON body expected by the chat-completions endpoint."""
        body: dict[str, Any] = {
            'model': self.model,
            'messages': [{'role': m.role.value, 'content': m.content} for m in self.messages],
            'temperature': self.params.temperature,
            'max_tokens': self.params.max_tokens,
        }
        for key in ('top_p', 'frequency_penalty', 'presence_penalty'):
            value = getattr(self.params, key)
            if value is not None:
                body[key] = value
        body['provider'] = self.provider.model_dump()
        return body


class ApiResult(BaseModel):
    """Reply text plus the total number of tokens the call consumed."""

    reply: str
    usage: int = 0

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Client configuration
# ---------------------------------------------------------------------------


class ClientConfig(BaseModel):
    """Endpoint, credential and model defaults for one client."""

    api_key: str = Field(..., min_length=10, max_length=200, repr=False)
    endpoint: str = 'https://openrouter.ai/api/v1/chat/completions'
    default_model: str = Field('gpt-4o-mini', pattern=MODEL_ID_PATTERN)
    model_params: ModelParams = Field(default_factory=ModelParams)
    referer: str = 'https://localhost:3000'
    title: str = 'HealthyMeal App'
    timeout_sec: float = Field(30.0, gt=0.0, description='Wall-clock limit for a single attempt')

    model_config = ConfigDict(frozen=True)

    @field_validator('endpoint')
    @classmethod
    def _require_https(cls, v: str) -> str:
        parsed = urlparse(v)
        if parsed.scheme != 'https' or not parsed.netloc:
            raise ValueError('Invalid endpoint URL: an https:// URL is required')
        return v

    def with_model(self, model: str, params: Mapping[str, Any] | None = None) -> ClientConfig:
        """Return a new config with *model* and merged parameter defaults."""
        # model_copy(update=...) skips validation, so rebuild instead
        return ClientConfig.model_validate(
            {**self.model_dump(), 'default_model': model, 'model_params': self.model_params.merged(params)},
        )


# ---------------------------------------------------------------------------
# Dietary preferences (read-only to this package)
# ---------------------------------------------------------------------------


class PreferencesRecord(BaseModel):
    """A user's stored dietary preferences. Every field may be absent."""

    id: int | None = None
    user_id: str | None = None
    diet_type: str | None = None
    daily_calorie_requirement: int | None = None
    allergies: str | None = None
    food_intolerances: str | None = None
    preferred_cuisines: str | None = None
    excluded_ingredients: str | None = None
    macro_distribution_protein: float | None = None
    macro_distribution_fats: float | None = None
    macro_distribution_carbohydrates: float | None = None

    model_config = ConfigDict(frozen=True, extra='ignore')

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> PreferencesRecord:
        """Build a record from a database row, ignoring unrelated columns."""
        return cls.model_validate(dict(row))


# ---------------------------------------------------------------------------
# Audit trail
# ---------------------------------------------------------------------------

AUDIT_SNIPPET_LENGTH = 1000


class ModificationError(BaseModel):
    """One row of the append-only ``recipe_modification_errors`` table."""

    recipe_text: str = Field(..., max_length=AUDIT_SNIPPET_LENGTH)
    error_code: int
    error_description: str
    ai_model: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_failure(cls, recipe_text: str, error_code: int, error_description: str, ai_model: str) -> ModificationError:
        return cls(
            recipe_text=recipe_text[:AUDIT_SNIPPET_LENGTH],
            error_code=error_code,
            error_description=error_description,
            ai_model=ai_model,
        )

    def to_row(self) -> dict[str, Any]:
        return self.model_dump(mode='json')
