"""
Retry settings loader.

Layers (last wins):
1. retrykit.config.thresholds defaults
2. YAML file (optional); keys at top level or under a `retry:` mapping
3. environment variables RETRYKIT_* (optionally seeded from a .env file)

Example YAML:

    retry:
      max_attempts: 5
      initial_delay_s: 0.5
      max_delay_s: 8
      factor: 2
      jitter: true
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Union

import yaml
from dotenv import load_dotenv

from retrykit.config.thresholds import ENV_PREFIX
from retrykit.logging_std import log_kv
from retrykit.policy import RetryPolicy

logger = logging.getLogger(__name__)


class SettingsError(ValueError):
    pass


_TRUE = ("1", "true", "yes", "y", "on")
_FALSE = ("0", "false", "no", "n", "off", "")


def _parse_bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    if s in _TRUE:
        return True
    if s in _FALSE:
        return False
    raise ValueError(f"not a boolean: {v!r}")


def _parse_int(v: Any) -> int:
    if isinstance(v, bool):
        raise ValueError("bool not allowed")
    if isinstance(v, int):
        return v
    return int(str(v).strip())


def _parse_float(v: Any) -> float:
    if isinstance(v, bool):
        raise ValueError("bool not allowed")
    return float(str(v).strip()) if isinstance(v, str) else float(v)


_FIELDS: Dict[str, Callable[[Any], Any]] = {
    "max_attempts": _parse_int,
    "initial_delay_s": _parse_float,
    "max_delay_s": _parse_float,
    "factor": _parse_float,
    "jitter": _parse_bool,
}


def _coerce(key: str, raw: Any, source: str) -> Any:
    try:
        return _FIELDS[key](raw)
    except (TypeError, ValueError) as exc:
        raise SettingsError(f"{source}: invalid value for {key}: {raw!r}") from exc


def read_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise SettingsError(f"{p}: expected a mapping, got {type(data).__name__}")
    section = data.get("retry", data)
    if not isinstance(section, dict):
        raise SettingsError(f"{p}: 'retry' must be a mapping")
    return section


def from_mapping(values: Mapping[str, Any], *, base: Optional[RetryPolicy] = None, source: str = "mapping") -> RetryPolicy:
    changes: Dict[str, Any] = {}
    for key, raw in values.items():
        if key not in _FIELDS:
            log_kv(logger, "ignoring unknown retry setting", level=logging.WARNING, key=key, source=source)
            continue
        changes[key] = _coerce(key, raw, source)
    return (base or RetryPolicy()).with_overrides(**changes)


def from_env(env: Optional[Mapping[str, str]] = None, *, base: Optional[RetryPolicy] = None, prefix: str = ENV_PREFIX) -> RetryPolicy:
    env = os.environ if env is None else env
    values = {}
    for key in _FIELDS:
        name = prefix + key.upper()
        if name in env and env[name] != "":
            values[key] = env[name]
    return from_mapping(values, base=base, source="env")


def load_policy(
    path: Optional[Union[str, Path]] = None,
    *,
    env: Optional[Mapping[str, str]] = None,
    prefix: str = ENV_PREFIX,
    dotenv_path: Optional[Union[str, Path]] = None,
) -> RetryPolicy:
    """Build a RetryPolicy from defaults, an optional YAML file and the environment."""
    if dotenv_path is not None:
        # Never override real environment variables.
        load_dotenv(dotenv_path, override=False)

    policy = RetryPolicy()
    if path is not None:
        policy = from_mapping(read_yaml(path), base=policy, source=str(path))
    policy = from_env(env, base=policy, prefix=prefix)

    if not policy.is_valid():
        raise SettingsError(f"invalid retry policy: {policy!r}")
    log_kv(
        logger,
        "retry policy loaded",
        level=logging.DEBUG,
        max_attempts=policy.max_attempts,
        initial_delay_s=policy.initial_delay_s,
        max_delay_s=policy.max_delay_s,
        factor=policy.factor,
        jitter=policy.jitter,
    )
    return policy


__all__ = ["SettingsError", "from_env", "from_mapping", "load_policy", "read_yaml"]
