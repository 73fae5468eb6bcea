# retrykit/__init__.py
"""
retrykit - retry with exponential backoff, jitter and cooperative cancellation.

Modules:
- policy: RetryPolicy (attempts, delays, factor, jitter)
- backoff: gap math (pure)
- cancellation: CancellationToken, deadlines
- retrier: execute / run / Retrier
- aio: asyncio variants
- settings: YAML + env loading
"""

from __future__ import annotations

from retrykit.aio import execute_async, run_async
from retrykit.cancellation import (
    BACKGROUND,
    CancellationError,
    CancellationToken,
    Cancelled,
    DeadlineExceeded,
)
from retrykit.logging_std import configure_logging
from retrykit.policy import RetryPolicy
from retrykit.result import Err, Ok, Result
from retrykit.retrier import Retrier, RetryError, execute, run
from retrykit.settings import SettingsError, load_policy

__version__ = "1.0.0"

__all__ = [
    "BACKGROUND",
    "CancellationError",
    "CancellationToken",
    "Cancelled",
    "DeadlineExceeded",
    "Err",
    "Ok",
    "Result",
    "Retrier",
    "RetryError",
    "RetryPolicy",
    "SettingsError",
    "configure_logging",
    "execute",
    "execute_async",
    "load_policy",
    "run",
    "run_async",
]
