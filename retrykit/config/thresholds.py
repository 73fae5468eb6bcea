"""Canonical retry defaults. Overridable via retrykit.settings."""

from __future__ import annotations

# Attempts include the first call
DEFAULT_MAX_ATTEMPTS = 3

# Backoff (seconds)
DEFAULT_INITIAL_DELAY_S = 0.1
DEFAULT_MAX_DELAY_S = 0.0  # 0 = no cap
DEFAULT_FACTOR = 2.0
DEFAULT_JITTER = False

ENV_PREFIX = "RETRYKIT_"
