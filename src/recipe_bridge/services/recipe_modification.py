"""services.recipe_modification

Rewrites a recipe to fit a user's dietary preferences with the LLM client.

Every failure is classified into the audit taxonomy and appended to the
``recipe_modification_errors`` table before it propagates to the caller.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from recipe_bridge.adapters.openrouter_adapter import OpenRouterClient
from recipe_bridge.core.exceptions import EmptyResponseError, PreferencesNotFoundError, classify_error
from recipe_bridge.core.guard import validate_recipe_text
from recipe_bridge.core.types import ModelParams, ModificationError
from recipe_bridge.services.preferences import format_preferences
from recipe_bridge.services.prompts import RECIPE_SYSTEM_MESSAGE, build_modification_prompt
from recipe_bridge.services.stores import MODIFICATION_ERRORS_TABLE

if TYPE_CHECKING:
    from recipe_bridge.core.abc import AbstractLLMClient
    from recipe_bridge.services.stores import AuditLog, PreferencesRepository

logger = logging.getLogger(__name__)

RECIPE_MODEL = 'gpt-4o-mini'

# Balanced creativity, room for a full recipe
RECIPE_MODEL_PARAMS = ModelParams(
    temperature=0.7,
    max_tokens=2000,
    top_p=0.9,
    frequency_penalty=0.1,
    presence_penalty=0.1,
)

GENERATION_OVERRIDES = {'temperature': 0.7, 'max_tokens': 2000}


def create_recipe_client() -> OpenRouterClient:
    """OpenRouter client tuned for recipe rewriting, configured from env."""
    return OpenRouterClient.from_env(
        default_model=RECIPE_MODEL,
        model_params=RECIPE_MODEL_PARAMS,
        system_message=RECIPE_SYSTEM_MESSAGE,
    )


class RecipeModificationService:
    """Orchestrates validation, prompt building, the LLM call and auditing.

    An injected *client* is switched to the recipe system message. A client the
    service builds itself is closed by :meth:`aclose`.
    """

    def __init__(
        self,
        preferences: PreferencesRepository,
        audit_log: AuditLog,
        client: AbstractLLMClient | None = None,
    ) -> None:
        self._preferences = preferences
        self._audit_log = audit_log
        self._owns_client = client is None
        if client is None:
            client = create_recipe_client()
        else:
            client.set_system_message(RECIPE_SYSTEM_MESSAGE)
        self._client = client

    @property
    def client(self) -> AbstractLLMClient:
        return self._client

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> RecipeModificationService:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def modify_recipe(self, recipe_text: str, user_id: str) -> str:
        """Return *recipe_text* rewritten for *user_id*'s preferences.

        The reply is returned exactly as the model produced it.

        Raises
        ------
        InvalidInputError
            Recipe text is blank or outside 100..8000 characters.
        PreferencesNotFoundError
            The user has no stored preferences.
        EmptyResponseError
            The model answered with blank content.
        RecipeBridgeError
            Any client failure, see :mod:`recipe_bridge.core.exceptions`.

        """
        try:
            validate_recipe_text(recipe_text)

            preferences = await self._preferences.get_user_preferences(user_id)
            if preferences is None:
                raise PreferencesNotFoundError('User preferences not found. Please set your dietary preferences first.')

            prompt = build_modification_prompt(recipe_text, format_preferences(preferences))
            response = await self._client.send_message(prompt, GENERATION_OVERRIDES)

            modified = response.reply
            if not modified or not modified.strip():
                raise EmptyResponseError('AI service returned empty response')
        except Exception as exc:
            await self._record_failure(recipe_text, exc)
            raise

        return modified

    async def _record_failure(self, recipe_text: object, exc: Exception) -> None:
        record = ModificationError.from_failure(
            recipe_text if isinstance(recipe_text, str) else '',
            classify_error(exc),
            str(exc) or type(exc).__name__,
            self._client.config.default_model,
        )
        try:
            await self._audit_log.insert(MODIFICATION_ERRORS_TABLE, record.to_row())
        except Exception:
            # The original failure is what the caller must see.
            logger.exception('Failed to log modification error', extra={'error_code': record.error_code})
