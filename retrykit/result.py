from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")
F = TypeVar("F")


class Result(Generic[T, E]):
    """
    Ok/Err outcome of a retried operation.

    The retrier collapses "success, last failure or cancellation reason" into
    one value so the caller decides what to do with it:

        outcome = execute(token, fetch, policy)
        if outcome.is_ok():
            use(outcome.value)
        else:
            report(outcome.error)
    """

    def is_ok(self) -> bool:
        raise NotImplementedError

    def is_err(self) -> bool:
        raise NotImplementedError

    def unwrap(self) -> T:
        """
        Value if Ok. On Err, raises the error itself when it is an exception.
        """
        raise NotImplementedError

    def map(self, fn: Callable[[T], U]) -> Result[U, E]:
        raise NotImplementedError

    def map_err(self, fn: Callable[[E], F]) -> Result[T, F]:
        raise NotImplementedError

    def bind(self, fn: Callable[[T], Result[U, E]]) -> Result[U, E]:
        raise NotImplementedError

    def unwrap_or(self, default: T) -> T:
        raise NotImplementedError

    def unwrap_or_else(self, fn: Callable[[E], T]) -> T:
        raise NotImplementedError


@dataclass(frozen=True)
class Ok(Result[T, E]):
    value: T = None  # type: ignore[assignment]

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def map(self, fn: Callable[[T], U]) -> Result[U, E]:
        return Ok(fn(self.value))

    def map_err(self, fn: Callable[[E], F]) -> Result[T, F]:
        return Ok(self.value)  # type: ignore[return-value]

    def bind(self, fn: Callable[[T], Result[U, E]]) -> Result[U, E]:
        return fn(self.value)

    def unwrap_or(self, default: T) -> T:
        return self.value

    def unwrap_or_else(self, fn: Callable[[E], T]) -> T:
        return self.value


@dataclass(frozen=True)
class Err(Result[T, E]):
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        if isinstance(self.error, BaseException):
            raise self.error
        raise ValueError(f"Called unwrap() on Err: {self.error!r}")

    def map(self, fn: Callable[[T], U]) -> Result[U, E]:
        return Err(self.error)  # type: ignore[return-value]

    def map_err(self, fn: Callable[[E], F]) -> Result[T, F]:
        return Err(fn(self.error))

    def bind(self, fn: Callable[[T], Result[U, E]]) -> Result[U, E]:
        return Err(self.error)  # type: ignore[return-value]

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_or_else(self, fn: Callable[[E], T]) -> T:
        return fn(self.error)


def ok(value: T = None) -> Result[T, Any]:  # type: ignore[assignment]
    return Ok(value)


def err(error: E) -> Result[Any, E]:
    return Err(error)


def as_result(value: Any) -> Result[Any, Any]:
    """Pass Ok/Err through; wrap anything else as Ok."""
    if isinstance(value, Result):
        return value
    return Ok(value)
