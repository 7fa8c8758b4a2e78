import asyncio

import pytest

from recipe_bridge.core.exceptions import (
    InvalidResponseError,
    RateLimitExceededError,
    UpstreamAuthError,
    UpstreamConnectionError,
    UpstreamServerError,
)
from recipe_bridge.core.retry import RetryStrategy, with_retry


def test_compute_delay_doubles_and_caps() -> None:
    strategy = RetryStrategy()
    assert strategy.compute_delay(0) == 1.0  # 1 * 2^0
    assert strategy.compute_delay(1) == 2.0  # noqa: PLR2004
    assert strategy.compute_delay(2) == 4.0  # noqa: PLR2004
    assert strategy.compute_delay(3) == 8.0  # noqa: PLR2004
    # 上限チェック
    assert strategy.compute_delay(4) == strategy.max_delay_sec
    assert strategy.compute_delay(10) == strategy.max_delay_sec


@pytest.mark.parametrize('status', [429, 500, 502, 503, 599])
def test_retryable_statuses(status: int) -> None:
    assert RetryStrategy().should_retry(status, 0)


@pytest.mark.parametrize('status', [400, 401, 403, 404, 422])
def test_client_statuses_are_final(status: int) -> None:
    assert not RetryStrategy().should_retry(status, 0)


def test_attempt_budget() -> None:
    strategy = RetryStrategy()
    assert strategy.should_retry(500, 2)
    assert not strategy.should_retry(500, 3)


def test_typed_errors() -> None:
    strategy = RetryStrategy()
    assert strategy.should_retry(UpstreamServerError(503), 0)
    assert strategy.should_retry(RateLimitExceededError(429), 0)
    assert strategy.should_retry(UpstreamConnectionError('Network error: refused'), 0)
    assert not strategy.should_retry(UpstreamAuthError(401), 0)
    # shape errors never retry, even if the text looks transient
    assert not strategy.should_retry(InvalidResponseError('connection closed mid-body'), 0)


@pytest.mark.parametrize(
    'exc',
    [
        ConnectionError('connection reset by peer'),
        OSError('Network is unreachable'),
        RuntimeError('request timeout'),
        RuntimeError('fetch failed'),
        TimeoutError(),
    ],
)
def test_transient_vocabulary(exc: Exception) -> None:
    assert RetryStrategy().should_retry(exc, 0)


@pytest.mark.parametrize('exc', [ValueError('bad value'), RuntimeError('boom'), KeyError('choices')])
def test_arbitrary_errors_are_not_retried(exc: Exception) -> None:
    assert not RetryStrategy().should_retry(exc, 0)


@pytest.mark.asyncio
async def test_wrapper_success_first_try() -> None:
    calls = {'cnt': 0}

    @with_retry(RetryStrategy(base_delay_sec=0, max_delay_sec=0))
    async def _fn() -> str:
        calls['cnt'] += 1
        return 'ok'

    assert await _fn() == 'ok'
    assert calls['cnt'] == 1


@pytest.mark.asyncio
async def test_wrapper_eventual_success(monkeypatch: pytest.MonkeyPatch) -> None:
    delays: list[float] = []

    async def _fake_sleep(delay: float) -> None:
        delays.append(delay)

    # asyncio.sleep をスタブ化して高速化
    monkeypatch.setattr(asyncio, 'sleep', _fake_sleep)
    calls = {'cnt': 0}

    @with_retry(RetryStrategy())
    async def _fn() -> str:
        calls['cnt'] += 1
        if calls['cnt'] < 3:  # noqa: PLR2004
            raise RateLimitExceededError(429, 'busy')
        return 'done'

    assert await _fn() == 'done'
    assert calls['cnt'] == 3  # noqa: PLR2004
    assert delays == [1.0, 2.0]


@pytest.mark.asyncio
async def test_wrapper_exhaustion_reraises_last_error(monkeypatch: pytest.MonkeyPatch) -> None:
    async def _fake_sleep(delay: float) -> None:  # noqa: ARG001
        return None

    monkeypatch.setattr(asyncio, 'sleep', _fake_sleep)
    calls = {'cnt': 0}

    @with_retry(RetryStrategy())
    async def _always_fail() -> None:
        calls['cnt'] += 1
        raise UpstreamServerError(500, f'still down #{calls["cnt"]}')

    with pytest.raises(UpstreamServerError, match='still down #4'):
        await _always_fail()
    assert calls['cnt'] == 4  # noqa: PLR2004


@pytest.mark.asyncio
async def test_wrapper_non_retryable_bubbles_immediately() -> None:
    calls = {'cnt': 0}

    @with_retry(RetryStrategy(base_delay_sec=0, max_delay_sec=0))
    async def _fn() -> None:
        calls['cnt'] += 1
        raise UpstreamAuthError(401)

    with pytest.raises(UpstreamAuthError):
        await _fn()
    assert calls['cnt'] == 1
