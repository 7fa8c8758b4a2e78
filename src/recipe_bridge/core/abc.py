"""core.abc

Abstract base class that *all* LLM transport adapters must implement.

Design goals
============
1. **One public operation** - callers interact exclusively via
    `send_message()` passing plain text and optional parameter overrides.
    They never touch provider-specific payloads.
2. **Built-in retry** - each transport call is wrapped in the `with_retry()`
    decorator so every adapter inherits the back-off behaviour by default.
3. **Validated edges** - text is guarded before it leaves the process and
    responses are shape-checked before they reach the caller.
4. **Snapshot configuration** - the config is an immutable value; a call
    reads it once, so reconfiguring mid-flight never affects that call.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from recipe_bridge.core import guard
from recipe_bridge.core.config import build_client_config
from recipe_bridge.core.exceptions import (
    EmptyResponseError,
    InvalidInputError,
    InvalidResponseError,
    UpstreamTimeoutError,
)
from recipe_bridge.core.model_id import is_valid_model_id
from recipe_bridge.core.payload import build_request_payload
from recipe_bridge.core.retry import RetryStrategy, with_retry
from recipe_bridge.core.types import ApiResult, ClientConfig

if TYPE_CHECKING:
    from recipe_bridge.core.types import RequestPayload

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_MESSAGE = 'System: You are interacting with an intelligent assistant leveraging OpenRouter API.'


class AbstractLLMClient(ABC):
    """Provider-independent chat-completion client."""

    # ---------------------------------------------------------------------
    # Construction
    # ---------------------------------------------------------------------

    def __init__(
        self,
        config: ClientConfig | Mapping[str, Any],
        *,
        retry_strategy: RetryStrategy | None = None,
        system_message: str | None = None,
    ) -> None:
        """Store *config*, the retry strategy and the system message."""
        self._config: ClientConfig = build_client_config(config)
        self._retry_strategy: RetryStrategy = retry_strategy or RetryStrategy(
            max_retries=3,
            base_delay_sec=1.0,
            backoff_multiplier=2.0,
            max_delay_sec=10.0,
        )
        self._system_message: str = DEFAULT_SYSTEM_MESSAGE
        self.last_response: ApiResult | None = None
        if system_message is not None:
            self.set_system_message(system_message)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def system_message(self) -> str:
        return self._system_message

    def configure(self, config: ClientConfig | Mapping[str, Any]) -> None:
        """Replace the whole configuration after validating it."""
        self._config = build_client_config(config)

    def set_system_message(self, text: str) -> None:
        if not guard.validate(text):
            raise InvalidInputError(
                f'System message cannot be empty and must be less than {guard.MAX_MESSAGE_LENGTH} characters',
            )
        self._system_message = guard.sanitize(text)

    def configure_model(self, model_id: str, params: Mapping[str, Any] | None = None) -> None:
        """Switch the default model and merge *params* into the defaults."""
        if not is_valid_model_id(model_id):
            raise InvalidInputError('Model name cannot be empty and must contain only valid characters')
        try:
            self._config = self._config.with_model(model_id, params)
        except ValidationError as exc:
            raise InvalidInputError(f'Invalid model parameters: {_summarize(exc)}') from exc

    def get_last_response(self) -> ApiResult | None:
        return self.last_response

    # ------------------------------------------------------------------
    # Public async API
    # ------------------------------------------------------------------

    async def send_message(
        self,
        message: str,
        params: Mapping[str, Any] | None = None,
        *,
        model: str | None = None,
    ) -> ApiResult:
        """Send *message* under the current system message and return the reply.

        Subclasses **must not** override this - override `_invoke()` instead.

        Parameters
        ----------
        message
            User text; validated and sanitised before sending.
        params
            Per-call overrides for the model parameters.
        model
            Per-call model override; the shared default is left untouched.

        Raises
        ------
        InvalidInputError
            Text, parameters or model identifier failed validation.
        RecipeBridgeError
            Any upstream failure, after retries where applicable.

        """
        config = self._config
        system_message = self._system_message

        if not guard.validate(message):
            raise InvalidInputError(
                f'Message cannot be empty and must be less than {guard.MAX_MESSAGE_LENGTH} characters',
            )
        if model is not None and not is_valid_model_id(model):
            raise InvalidInputError('Model name cannot be empty and must contain only valid characters')

        try:
            payload = build_request_payload(
                system_message,
                guard.sanitize(message),
                model or config.default_model,
                config.model_params,
                params,
            )
        except ValidationError as exc:
            raise InvalidInputError(f'Invalid model parameters: {_summarize(exc)}') from exc

        @with_retry(self._retry_strategy)
        async def _call() -> Mapping[str, Any]:  # inner closure captures payload
            try:
                return await asyncio.wait_for(self._invoke(payload, config), timeout=config.timeout_sec)
            except TimeoutError as exc:
                raise UpstreamTimeoutError(f'Network timeout after {config.timeout_sec}s') from exc

        try:
            result = parse_api_response(await _call())
        except Exception as exc:
            self._log_error(exc, config, payload.model)
            raise

        self.last_response = result
        return result

    # ------------------------------------------------------------------
    # Methods to implement in concrete adapters
    # ------------------------------------------------------------------

    @abstractmethod
    async def _invoke(self, payload: RequestPayload, config: ClientConfig) -> Mapping[str, Any]:
        """Perform **one** attempt and return the decoded JSON body.

        Non-2xx answers must be raised as typed errors carrying
        ``status_code`` so the retry policy can judge them.
        """

    async def aclose(self) -> None:
        """Release transport resources; no-op unless the adapter holds any."""

    async def __aenter__(self) -> AbstractLLMClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _log_error(self, exc: BaseException, config: ClientConfig, model: str) -> None:
        logger.error(
            'LLM call failed: %s: %s',
            type(exc).__name__,
            exc,
            extra={
                'timestamp': datetime.now(UTC).isoformat(),
                'service': type(self).__name__,
                'endpoint': config.endpoint,
                'model': model,
                'error_name': type(exc).__name__,
                'error_message': str(exc),
            },
        )

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        return f'<{self.__class__.__name__} model={self._config.default_model!r}>'


def parse_api_response(data: Mapping[str, Any]) -> ApiResult:
    """Validate a chat-completion body and extract the reply.

    Shape problems are fatal: they are raised as :class:`InvalidResponseError`
    and never retried.
    """
    choices = data.get('choices') if isinstance(data, Mapping) else None
    if not isinstance(choices, list) or not choices:
        raise InvalidResponseError('Invalid API response: no choices found')

    message = choices[0].get('message') if isinstance(choices[0], Mapping) else None
    content = message.get('content') if isinstance(message, Mapping) else None
    if not isinstance(content, str):
        raise InvalidResponseError('Invalid API response: no message content found')
    if not content:
        raise EmptyResponseError('Invalid API response: message content is empty')

    usage = data.get('usage')
    total_tokens = usage.get('total_tokens') if isinstance(usage, Mapping) else None
    if not isinstance(total_tokens, int) or isinstance(total_tokens, bool):
        total_tokens = 0
    return ApiResult(reply=content, usage=total_tokens)


def _summarize(exc: ValidationError) -> str:
    return '; '.join(f"{'.'.join(str(p) for p in err['loc']) or 'params'}: {err['msg']}" for err in exc.errors())


