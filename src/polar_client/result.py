"""Result type returned by every network operation.

A ``Result[T]`` is either ``Success(value)`` or ``Failure(error)``. Expected
remote outcomes (not found, validation, auth, rate limits, outages) come back
as ``Failure`` values carrying a classified :class:`ApiError`; nothing is
raised for them.

Example:
    ```python
    result = await client.products.get("prod_123")
    if result.is_failure:
        if result.error.kind is ErrorKind.RATE_LIMITED:
            ...
    else:
        product = result.value
    ```
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, Literal, TypeVar

from polar_client.errors.models import ApiError

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    """Success result."""

    value: T

    @property
    def is_success(self) -> Literal[True]:
        return True

    @property
    def is_failure(self) -> Literal[False]:
        return False

    @property
    def error(self) -> None:
        return None

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: Any) -> T:
        return self.value

    def map(self, fn: Callable[[T], U]) -> "Success[U]":
        return Success(fn(self.value))

    def and_then(self, fn: "Callable[[T], Result[U]]") -> "Result[U]":
        return fn(self.value)


@dataclass(frozen=True, slots=True)
class Failure:
    """Failure result.

    Reading :attr:`value` (or calling :meth:`unwrap`) raises the
    :class:`~polar_client.errors.PolarAPIError` subclass for the error kind.
    """

    error: ApiError

    @property
    def is_success(self) -> Literal[False]:
        return False

    @property
    def is_failure(self) -> Literal[True]:
        return True

    @property
    def value(self) -> Any:
        raise self.error.to_exception()

    def unwrap(self) -> Any:
        raise self.error.to_exception()

    def unwrap_or(self, default: U) -> U:
        return default

    def map(self, fn: Callable[[Any], Any]) -> "Failure":
        return self

    def and_then(self, fn: Callable[[Any], Any]) -> "Failure":
        return self

    def __repr__(self) -> str:
        return f"Failure({self.error})"


Result = Success[T] | Failure
