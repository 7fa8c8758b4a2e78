from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from recipe_bridge.adapters.openrouter_adapter import OpenRouterClient
from recipe_bridge.core.retry import RetryStrategy
from recipe_bridge.core.types import ClientConfig

TEST_ENDPOINT = 'https://llm.example.test/api/v1/chat/completions'


def _completion(content: Any = 'ok', total_tokens: int | None = 42) -> dict[str, Any]:
    """Minimal chat-completion body."""
    body: dict[str, Any] = {
        'id': 'gen-1',
        'model': 'gpt-4o-mini',
        'choices': [{'index': 0, 'message': {'role': 'assistant', 'content': content}, 'finish_reason': 'stop'}],
    }
    if total_tokens is not None:
        body['usage'] = {'prompt_tokens': 1, 'completion_tokens': 1, 'total_tokens': total_tokens}
    return body


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)

    def bodies(self) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture
def completion() -> Callable[..., dict[str, Any]]:
    return _completion


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(api_key='sk-or-test-0123456789', endpoint=TEST_ENDPOINT)


@pytest.fixture
def fast_retry() -> RetryStrategy:
    return RetryStrategy(base_delay_sec=0, max_delay_sec=0)


@pytest.fixture
def make_client(
    client_config: ClientConfig,
    fast_retry: RetryStrategy,
) -> Callable[..., tuple[OpenRouterClient, RecordingTransport]]:
    """Return a factory building an OpenRouterClient over a recording mock transport."""

    def _make(
        handler: Callable[[httpx.Request], httpx.Response],
        **kwargs: Any,
    ) -> tuple[OpenRouterClient, RecordingTransport]:
        transport = RecordingTransport(handler)
        kwargs.setdefault('retry_strategy', fast_retry)
        client = OpenRouterClient(
            kwargs.pop('config', client_config),
            http_client=httpx.AsyncClient(transport=transport),
            **kwargs,
        )
        return client, transport

    return _make
