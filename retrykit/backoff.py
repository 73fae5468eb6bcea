"""Delay math for exponential backoff. Pure functions, no sleeping."""

from __future__ import annotations

import random
from typing import List, Optional, Protocol

import deal

from retrykit.policy import RetryPolicy


class RandomSource(Protocol):
    def random(self) -> float: ...


def clamp(delay_s: float, policy: RetryPolicy) -> float:
    if policy.capped and delay_s > policy.max_delay_s:
        return policy.max_delay_s
    return delay_s


@deal.pre(lambda current_delay_s, policy, rng: current_delay_s >= 0, message="current_delay_s >= 0")
@deal.post(lambda result: result >= 0, message="gap must be non-negative")
@deal.raises(deal.PreContractError, deal.RaisesContractError)
def next_gap(current_delay_s: float, policy: RetryPolicy, rng: RandomSource) -> float:
    """
    Wait before the next attempt.

    Without jitter this is current_delay_s. With jitter it is uniform in
    [0, current_delay_s); a zero delay stays zero instead of sampling an empty
    range. Either way the result is clamped to max_delay_s when a cap is set.
    """
    gap = current_delay_s
    if policy.jitter:
        gap = rng.random() * current_delay_s if current_delay_s > 0 else 0.0
    return clamp(gap, policy)


@deal.pre(lambda current_delay_s, policy: current_delay_s >= 0, message="current_delay_s >= 0")
@deal.post(lambda result: result >= 0, message="delay must be non-negative")
@deal.raises(deal.PreContractError, deal.RaisesContractError)
def grow(current_delay_s: float, policy: RetryPolicy) -> float:
    if current_delay_s == 0 or policy.factor == 0:
        return 0.0
    return clamp(current_delay_s * policy.factor, policy)


def schedule(policy: RetryPolicy, rng: Optional[RandomSource] = None) -> List[float]:
    """Gaps a call that fails every attempt would wait through (attempts - 1 of them)."""
    rng = rng if rng is not None else random.Random()
    gaps: List[float] = []
    delay = policy.initial_delay_s
    for _ in range(policy.attempts - 1):
        gaps.append(next_gap(delay, policy, rng))
        delay = grow(delay, policy)
    return gaps
