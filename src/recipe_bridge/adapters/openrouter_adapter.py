"""adapters.openrouter_adapter

Concrete adapter that bridges :class:`recipe_bridge.core.abc.AbstractLLMClient`
with the **OpenRouter Chat Completions** HTTP API.

The endpoint is addressed directly with ``httpx`` rather than through a vendor
SDK so that retry, timeout and the provider-routing directive stay under this
package's control.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from recipe_bridge.core.abc import AbstractLLMClient
from recipe_bridge.core.config import load_client_config
from recipe_bridge.core.exceptions import (
    InvalidResponseError,
    UpstreamConnectionError,
    UpstreamTimeoutError,
    error_for_status,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from recipe_bridge.core.retry import RetryStrategy
    from recipe_bridge.core.types import ClientConfig, RequestPayload

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Adapter implementation
# ---------------------------------------------------------------------------


class OpenRouterClient(AbstractLLMClient):
    """Adapter for the OpenRouter chat-completions endpoint."""

    def __init__(
        self,
        config: ClientConfig | Mapping[str, Any],
        *,
        retry_strategy: RetryStrategy | None = None,
        system_message: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(config, retry_strategy=retry_strategy, system_message=system_message)
        self._owns_http_client = http_client is None
        # Per-attempt timeouts are enforced by the base class.
        self._http = http_client or httpx.AsyncClient(timeout=None)

    @classmethod
    def from_env(
        cls,
        *,
        retry_strategy: RetryStrategy | None = None,
        system_message: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        **overrides: Any,
    ) -> OpenRouterClient:
        """Build a client from ``OPENROUTER_*`` variables; *overrides* win."""
        return cls(
            load_client_config(**overrides),
            retry_strategy=retry_strategy,
            system_message=system_message,
            http_client=http_client,
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _invoke(self, payload: RequestPayload, config: ClientConfig) -> dict[str, Any]:
        headers = {
            'Content-Type': 'application/json',
            'Authorization': f'Bearer {config.api_key}',
            'HTTP-Referer': config.referer,
            'X-Title': config.title,
        }
        try:
            response = await self._http.post(config.endpoint, json=payload.to_wire(), headers=headers)
        except httpx.TimeoutException as exc:
            raise UpstreamTimeoutError(f'Network timeout: {exc}') from exc
        except httpx.TransportError as exc:
            raise UpstreamConnectionError(f'Network error: {exc}') from exc

        logger.debug('OpenRouter answered %s for model %s', response.status_code, payload.model)

        if not response.is_success:
            raise error_for_status(response.status_code, _error_detail(response))

        try:
            data = response.json()
        except ValueError as exc:
            raise InvalidResponseError('Invalid API response: body is not valid JSON') from exc
        if not isinstance(data, dict):
            raise InvalidResponseError('Invalid API response: expected a JSON object')
        return data

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http.aclose()


def _error_detail(response: httpx.Response) -> str | None:
    """Pull a human-readable message out of an error body, if there is one."""
    text = response.text
    try:
        body = response.json()
    except ValueError:
        return text or None

    if not isinstance(body, dict):
        return text or None
    error = body.get('error')
    if isinstance(error, dict) and error.get('message'):
        return str(error['message'])
    if isinstance(error, str) and error:
        return error
    if body.get('message'):
        return str(body['message'])
    return None
