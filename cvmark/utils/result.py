"""
Two-variant result values.

Used where a whole batch of errors has to travel back to the caller instead
of stopping at the first raised exception (see validation.validate_cv).
"""

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")
F = TypeVar("F")


class UnwrapError(ValueError):
    """Raised when unwrap() is called on a Failure."""

    def __init__(self, error):
        self.error = error
        super().__init__(f"Attempted to unwrap a failure: {error!r}")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure(Generic[E]):
    error: E

    @property
    def ok(self) -> bool:
        return False


Result = Union[Success[T], Failure[E]]


def success(value: T) -> Success[T]:
    return Success(value)


def failure(error: E) -> Failure[E]:
    return Failure(error)


def is_success(result: Result) -> bool:
    return isinstance(result, Success)


def is_failure(result: Result) -> bool:
    return isinstance(result, Failure)


def map_result(result: Result, fn: Callable[[T], U]) -> Result:
    """Apply fn to a Success value, pass a Failure through."""
    if isinstance(result, Success):
        return Success(fn(result.value))
    return result


def map_error(result: Result, fn: Callable[[E], F]) -> Result:
    """Apply fn to a Failure error, pass a Success through."""
    if isinstance(result, Failure):
        return Failure(fn(result.error))
    return result


def flat_map(result: Result, fn: Callable[[T], Result]) -> Result:
    if isinstance(result, Success):
        return fn(result.value)
    return result


def unwrap(result: Result):
    """
    Return the Success value.

    Raises:
        UnwrapError: If result is a Failure
    """
    if isinstance(result, Success):
        return result.value
    raise UnwrapError(result.error)


def unwrap_or(result: Result, default):
    if isinstance(result, Success):
        return result.value
    return default
