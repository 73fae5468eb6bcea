"""Cooperative cancellation tokens: "is done" + "reason", plus a timed wait."""

from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class CancellationError(Exception):
    """Base class for cancellation reasons."""


class Cancelled(CancellationError):
    pass


class DeadlineExceeded(CancellationError):
    pass


CancelCallback = Callable[[BaseException], None]


class CancellationToken:
    """
    Cancel signal shared between a caller and the code it runs.

    - cancel() is idempotent: the first reason wins.
    - wait(timeout_s) is the race used between retry attempts: it returns
      True as soon as the token is cancelled, False when the timeout elapses.
    - Callbacks registered with on_cancel() run once, in the cancelling thread
      (or immediately if the token is already cancelled).
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._reason: Optional[BaseException] = None
        self._callbacks: List[CancelCallback] = []
        self._timer: Optional[threading.Timer] = None
        self._parent: Optional["CancellationToken"] = None

    @classmethod
    def with_timeout(cls, seconds: float, parent: Optional["CancellationToken"] = None) -> "CancellationToken":
        """Token that cancels itself with DeadlineExceeded after `seconds`."""
        token = parent.child() if parent is not None else cls()
        if seconds <= 0:
            token.cancel(DeadlineExceeded(f"deadline of {seconds:.3f}s exceeded"))
            return token
        timer = threading.Timer(
            min(seconds, threading.TIMEOUT_MAX),
            token.cancel,
            args=(DeadlineExceeded(f"deadline of {seconds:.3f}s exceeded"),),
        )
        timer.daemon = True
        with token._lock:
            # parent may already be cancelled, or cancel us before the timer is armed
            if token._event.is_set():
                return token
            token._timer = timer
            timer.start()
        return token

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[BaseException]:
        return self._reason

    def cancel(self, reason: Optional[BaseException] = None) -> bool:
        """Returns True if this call cancelled the token, False if it already was."""
        with self._lock:
            if self._event.is_set():
                return False
            self._reason = reason if reason is not None else Cancelled("cancelled")
            callbacks, self._callbacks = self._callbacks, []
            timer, self._timer = self._timer, None
            if self._parent is not None:
                self._parent.remove_callback(self.cancel)
                self._parent = None
            self._event.set()

        if timer is not None:
            timer.cancel()
        logger.debug("token cancelled: %r", self._reason)
        for cb in callbacks:
            cb(self._reason)
        return True

    def wait(self, timeout_s: Optional[float] = None) -> bool:
        if timeout_s is not None:
            timeout_s = min(max(timeout_s, 0.0), threading.TIMEOUT_MAX)
        return self._event.wait(timeout_s)

    def on_cancel(self, callback: CancelCallback) -> None:
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback(self._reason)  # type: ignore[arg-type]

    def remove_callback(self, callback: CancelCallback) -> None:
        with self._lock:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

    def child(self) -> "CancellationToken":
        """Token cancelled (with the same reason) whenever this one is."""
        token = CancellationToken()
        token._parent = self
        self.on_cancel(token.cancel)
        return token

    def close(self) -> None:
        """Stop a pending deadline and release anyone waiting on this token."""
        self.cancel()

    def __enter__(self) -> "CancellationToken":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = f"cancelled reason={self._reason!r}" if self.is_cancelled else "active"
        return f"<{type(self).__name__} {state}>"


class _BackgroundToken(CancellationToken):
    """Never cancelled. wait() is a plain sleep."""

    def cancel(self, reason: Optional[BaseException] = None) -> bool:
        return False

    def on_cancel(self, callback: CancelCallback) -> None:
        return None

    def close(self) -> None:
        return None


BACKGROUND: CancellationToken = _BackgroundToken()


__all__ = [
    "BACKGROUND",
    "CancelCallback",
    "Cancelled",
    "CancellationError",
    "CancellationToken",
    "DeadlineExceeded",
]
