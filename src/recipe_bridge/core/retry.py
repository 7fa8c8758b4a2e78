"""core.retry

Reusable retry utilities with capped exponential back-off.
Designed to run in the **core** layer and depends only on Python stdlib + Pydantic.

Attempts are strictly sequential: the only suspension points are the wrapped
call itself and the back-off sleep between two attempts.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from http import HTTPStatus
from typing import TYPE_CHECKING, ParamSpec, TypeVar

from pydantic import BaseModel, Field

from recipe_bridge.core.exceptions import RecipeBridgeError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

P = ParamSpec('P')
T = TypeVar('T')

logger = logging.getLogger(__name__)

#: Words that mark an arbitrary exception as a transient transport failure.
TRANSIENT_ERROR_MARKERS: tuple[str, ...] = ('network', 'timeout', 'connection', 'fetch')


def is_retryable_status(status_code: int) -> bool:
    """429 and every 5xx are worth another attempt; other statuses are final."""
    return status_code == HTTPStatus.TOO_MANY_REQUESTS or status_code >= HTTPStatus.INTERNAL_SERVER_ERROR


class RetryStrategy(BaseModel):
    """Configuration for capped exponential back-off."""

    max_retries: int = Field(default=3, ge=0, description='Retries after the first call')
    base_delay_sec: float = Field(default=1.0, ge=0.0, description='Delay before the first retry (seconds)')
    backoff_multiplier: float = Field(default=2.0, ge=1.0, description='Growth factor per attempt')
    max_delay_sec: float = Field(default=10.0, ge=0.0, description='Upper bound for any sleep interval')

    model_config = {
        'frozen': True,
    }

    def compute_delay(self, attempt: int) -> float:
        """Sleep duration after the failed *attempt* (0-indexed)."""
        return min(self.base_delay_sec * (self.backoff_multiplier**attempt), self.max_delay_sec)

    def should_retry(self, signal: int | BaseException, attempt: int) -> bool:
        """Decide whether *signal* observed on *attempt* (0-indexed) is retried.

        *signal* is either an HTTP status code or the exception the attempt
        raised.
        """
        if attempt >= self.max_retries:
            return False
        if isinstance(signal, int):
            return is_retryable_status(signal)

        status_code = getattr(signal, 'status_code', None)
        if isinstance(status_code, int):
            return is_retryable_status(status_code)
        if isinstance(signal, RecipeBridgeError):
            return signal.transient

        text = f'{type(signal).__name__} {signal}'.lower()
        return any(marker in text for marker in TRANSIENT_ERROR_MARKERS)


def with_retry(
    strategy: RetryStrategy | None = None,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Retry decorator for coroutine functions.

    Parameters
    ----------
    strategy
        Retry policy. Defaults to RetryStrategy() if None.

    The last error propagates unchanged once the policy declines to retry,
    so callers see the real failure (e.g. ``UpstreamServerError``) rather than
    a generic "retries exhausted" wrapper.

    """
    retry_strategy = strategy or RetryStrategy()

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            attempt = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except Exception as exc:
                    if not retry_strategy.should_retry(exc, attempt):
                        raise
                    delay = retry_strategy.compute_delay(attempt)
                    logger.warning(
                        'Call failed (attempt %d/%d), retrying in %.1fs: %s',
                        attempt + 1,
                        retry_strategy.max_retries + 1,
                        delay,
                        exc,
                        extra={'attempt': attempt, 'delay_sec': delay},
                    )
                    await asyncio.sleep(delay)
                    attempt += 1

        return wrapper

    return decorator
