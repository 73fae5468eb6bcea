from __future__ import annotations

from typing import Iterable, List, Optional

import pytest
from hypothesis import HealthCheck, settings

from retrykit.cancellation import CancellationToken

# Hypothesis puede volverse "flaky" por velocidad (CI, CPU load).
# Es un healthcheck de performance, no un bug funcional.
settings.register_profile(
    "retrykit_stable",
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
    deadline=None,
)

settings.load_profile("retrykit_stable")


class RecordingToken(CancellationToken):
    """Token whose wait() returns at once and records the requested gap.

    cancel_on_wait=N cancels the token during the N-th wait (1-based).
    """

    def __init__(self, cancel_on_wait: Optional[int] = None) -> None:
        super().__init__()
        self.gaps: List[float] = []
        self._cancel_on_wait = cancel_on_wait

    def wait(self, timeout_s: Optional[float] = None) -> bool:
        self.gaps.append(timeout_s if timeout_s is not None else -1.0)
        if self._cancel_on_wait is not None and len(self.gaps) >= self._cancel_on_wait:
            self.cancel()
        return self.is_cancelled


class FixedRandom:
    """random() returns the given values in order, cycling."""

    def __init__(self, values: Iterable[float]) -> None:
        self.values = list(values)
        self.calls = 0

    def random(self) -> float:
        v = self.values[self.calls % len(self.values)]
        self.calls += 1
        return v


class FlakyOperation:
    """Fails `failures` times (raising numbered errors), then returns `value`."""

    def __init__(self, failures: int, value: object = "ok") -> None:
        self.failures = failures
        self.value = value
        self.calls = 0

    def __call__(self) -> object:
        self.calls += 1
        if self.calls <= self.failures:
            raise RuntimeError(f"failure #{self.calls}")
        return self.value


@pytest.fixture
def recording_token():
    return RecordingToken


@pytest.fixture
def fixed_random():
    return FixedRandom


@pytest.fixture
def flaky():
    return FlakyOperation
