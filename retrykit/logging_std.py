from __future__ import annotations

import logging
from typing import Any


_DEFAULT_FMT = "%(asctime)s %(levelname)s %(name)s | %(message)s"


def configure_logging(
    *,
    level: str = "INFO",
    fmt: str = _DEFAULT_FMT,
) -> None:
    """
    Idempotent-ish logging config.
    Importing this module does nothing. You must call configure_logging().
    """
    root = logging.getLogger()
    if root.handlers:
        # Already configured by the app or test runner.
        return
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=fmt)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def format_kv(**kv: Any) -> str:
    return " ".join([f"{k}={kv[k]!r}" for k in sorted(kv.keys())])


def log_kv(logger: logging.Logger, msg: str, *, level: int = logging.INFO, **kv: Any) -> None:
    if not logger.isEnabledFor(level):
        return
    if not kv:
        logger.log(level, msg)
        return
    logger.log(level, "%s | %s", msg, format_kv(**kv))
