"""asyncio flavour of the retry loop, for coroutine operations."""

from __future__ import annotations

import asyncio
import inspect
import logging
import random
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

import deal

from retrykit.backoff import RandomSource, grow, next_gap
from retrykit.cancellation import BACKGROUND, CancellationToken
from retrykit.logging_std import log_kv
from retrykit.policy import RetryPolicy
from retrykit.result import Err, Ok, Result, as_result
from retrykit.retrier import RetryError

logger = logging.getLogger(__name__)

T = TypeVar("T")

AsyncOperation = Callable[[], Union[Awaitable[Any], Any]]


async def _invoke(operation: AsyncOperation) -> Result[Any, Any]:
    try:
        value = operation()
        if inspect.isawaitable(value):
            value = await value
        return as_result(value)
    except Exception as exc:
        return Err(exc)


async def _wait(token: CancellationToken, gap_s: float) -> bool:
    """Sleep gap_s unless the token fires first. True means cancelled."""
    if token.is_cancelled:
        return True
    if token is BACKGROUND:
        await asyncio.sleep(gap_s)
        return False

    loop = asyncio.get_running_loop()
    fired = asyncio.Event()

    def _on_cancel(_reason: BaseException) -> None:
        loop.call_soon_threadsafe(fired.set)

    token.on_cancel(_on_cancel)
    try:
        await asyncio.wait_for(fired.wait(), timeout=gap_s)
    except asyncio.TimeoutError:
        return token.is_cancelled
    finally:
        token.remove_callback(_on_cancel)
    return True


@deal.pre(lambda token, operation, policy, *, rng=None: callable(operation), message="operation must be callable")
@deal.pre(lambda token, operation, policy, *, rng=None: isinstance(policy, RetryPolicy), message="policy must be RetryPolicy")
@deal.pre(lambda token, operation, policy, *, rng=None: policy.is_valid(), message="policy delays and factor must be >= 0")
async def execute_async(
    token: Optional[CancellationToken],
    operation: AsyncOperation,
    policy: RetryPolicy,
    *,
    rng: Optional[RandomSource] = None,
) -> Result[Any, Any]:
    """
    Same contract as retrykit.retrier.execute, awaiting the operation and the
    backoff instead of blocking the thread. Cancelling the surrounding task
    propagates asyncio.CancelledError as usual.
    """
    token = token if token is not None else BACKGROUND
    rng = rng if rng is not None else random.Random()
    attempts = policy.attempts
    delay = policy.initial_delay_s
    outcome: Result[Any, Any] = Err(None)

    for attempt in range(1, attempts + 1):
        outcome = await _invoke(operation)
        if outcome.is_ok():
            return outcome
        if attempt == attempts:
            break

        gap = next_gap(delay, policy, rng)
        log_kv(
            logger,
            "attempt failed, backing off",
            level=logging.DEBUG,
            attempt=attempt,
            attempts=attempts,
            error=outcome.error,  # type: ignore[union-attr]
            gap_s=round(gap, 6),
        )
        if await _wait(token, gap):
            log_kv(logger, "retry cancelled", attempt=attempt, reason=token.reason)
            return Err(token.reason)

        delay = grow(delay, policy)

    return outcome


async def run_async(
    operation: AsyncOperation,
    policy: RetryPolicy,
    *,
    token: Optional[CancellationToken] = None,
    rng: Optional[RandomSource] = None,
) -> Any:
    outcome = await execute_async(token, operation, policy, rng=rng)
    if isinstance(outcome, Ok):
        return outcome.value
    error = outcome.error  # type: ignore[union-attr]
    if isinstance(error, BaseException):
        raise error
    raise RetryError(error, policy.attempts)


__all__ = ["AsyncOperation", "execute_async", "run_async"]
