"""Retry an operation with exponential backoff, jitter and cooperative cancellation."""

from __future__ import annotations

import logging
import random
from typing import Any, Callable, Optional, TypeVar

import deal

from retrykit.backoff import RandomSource, grow, next_gap
from retrykit.cancellation import BACKGROUND, CancellationToken
from retrykit.logging_std import log_kv
from retrykit.policy import RetryPolicy
from retrykit.result import Err, Ok, Result, as_result

logger = logging.getLogger(__name__)

T = TypeVar("T")

Operation = Callable[[], Any]


class RetryError(Exception):
    """Raised by run() when the final failure is not itself an exception."""

    def __init__(self, error: Any, attempts: int) -> None:
        super().__init__(f"operation failed after {attempts} attempt(s): {error!r}")
        self.error = error
        self.attempts = attempts


def _invoke(operation: Operation) -> Result[Any, Any]:
    try:
        return as_result(operation())
    except Exception as exc:
        return Err(exc)


@deal.pre(lambda token, operation, policy, *, rng=None: callable(operation), message="operation must be callable")
@deal.pre(lambda token, operation, policy, *, rng=None: isinstance(policy, RetryPolicy), message="policy must be RetryPolicy")
@deal.pre(lambda token, operation, policy, *, rng=None: policy.initial_delay_s >= 0, message="initial_delay_s >= 0")
@deal.pre(lambda token, operation, policy, *, rng=None: policy.max_delay_s >= 0, message="max_delay_s >= 0")
@deal.pre(lambda token, operation, policy, *, rng=None: policy.factor >= 0, message="factor >= 0")
@deal.post(lambda result: isinstance(result, (Ok, Err)), message="returns Ok or Err")
@deal.raises(deal.PreContractError, deal.RaisesContractError)
def execute(
    token: Optional[CancellationToken],
    operation: Operation,
    policy: RetryPolicy,
    *,
    rng: Optional[RandomSource] = None,
) -> Result[Any, Any]:
    """
    Call operation() until it succeeds, attempts run out, or token is cancelled.

    Returns Ok(value) on success, Err(last failure) once every attempt failed,
    or Err(token.reason) when the token fires while waiting between attempts.
    The token is only consulted during waits: a running operation is never
    interrupted and the first attempt always runs.
    """
    token = token if token is not None else BACKGROUND
    rng = rng if rng is not None else random.Random()
    attempts = policy.attempts
    delay = policy.initial_delay_s
    outcome: Result[Any, Any] = Err(None)

    for attempt in range(1, attempts + 1):
        outcome = _invoke(operation)
        if outcome.is_ok():
            if attempt > 1:
                log_kv(logger, "retry succeeded", level=logging.DEBUG, attempt=attempt, attempts=attempts)
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

        if token.wait(gap):
            log_kv(logger, "retry cancelled", attempt=attempt, reason=token.reason)
            return Err(token.reason)

        delay = grow(delay, policy)

    log_kv(
        logger,
        "retry attempts exhausted",
        level=logging.DEBUG,
        attempts=attempts,
        error=outcome.error,  # type: ignore[union-attr]
    )
    return outcome


def run(
    operation: Callable[[], T],
    policy: RetryPolicy,
    *,
    token: Optional[CancellationToken] = None,
    rng: Optional[RandomSource] = None,
) -> T:
    """Like execute(), but returns the value and raises on failure or cancellation."""
    outcome = execute(token, operation, policy, rng=rng)
    if outcome.is_ok():
        return outcome.value  # type: ignore[union-attr]
    error = outcome.error  # type: ignore[union-attr]
    if isinstance(error, BaseException):
        raise error
    raise RetryError(error, policy.attempts)


class Retrier:
    """A policy (and optionally a random source) bound for repeated use."""

    def __init__(self, policy: RetryPolicy, *, rng: Optional[RandomSource] = None) -> None:
        self.policy = policy
        self._rng = rng

    def execute(self, operation: Operation, token: Optional[CancellationToken] = None) -> Result[Any, Any]:
        return execute(token, operation, self.policy, rng=self._rng)

    def run(self, operation: Callable[[], T], token: Optional[CancellationToken] = None) -> T:
        return run(operation, self.policy, token=token, rng=self._rng)

    def __repr__(self) -> str:
        return f"Retrier({self.policy!r})"


__all__ = ["Operation", "Retrier", "RetryError", "execute", "run"]
