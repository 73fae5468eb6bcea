"""Retry policy value object: attempts + exponential backoff with optional jitter."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Callable, Optional, TypeVar

from retrykit.config.thresholds import (
    DEFAULT_FACTOR,
    DEFAULT_INITIAL_DELAY_S,
    DEFAULT_JITTER,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_DELAY_S,
)

if TYPE_CHECKING:
    from retrykit.backoff import RandomSource
    from retrykit.cancellation import CancellationToken

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    initial_delay_s: float = DEFAULT_INITIAL_DELAY_S
    max_delay_s: float = DEFAULT_MAX_DELAY_S  # 0 = no cap
    factor: float = DEFAULT_FACTOR
    jitter: bool = DEFAULT_JITTER

    @property
    def attempts(self) -> int:
        """max_attempts normalized: anything below 1 means a single try."""
        return self.max_attempts if self.max_attempts >= 1 else 1

    @property
    def capped(self) -> bool:
        return self.max_delay_s > 0

    def is_valid(self) -> bool:
        return (
            self.initial_delay_s >= 0
            and self.max_delay_s >= 0
            and self.factor >= 0
            and not math.isnan(self.factor)
        )

    def with_overrides(self, **changes: Any) -> "RetryPolicy":
        return replace(self, **changes)

    def run(
        self,
        fn: Callable[[], T],
        *,
        token: Optional["CancellationToken"] = None,
        rng: Optional["RandomSource"] = None,
    ) -> T:
        """Return fn()'s value, or raise the last failure / the cancellation reason."""
        from retrykit.retrier import run

        return run(fn, self, token=token, rng=rng)
