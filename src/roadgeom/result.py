"""Explicit success/error values returned by fallible operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Iterable, List, TypeVar, Union

from roadgeom.errors import GeometryError

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful result carrying ``value``."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, fn: Callable[[T], U]) -> "Result[U]":
        return Ok(fn(self.value))

    def and_then(self, fn: Callable[[T], "Result[U]"]) -> "Result[U]":
        return fn(self.value)


@dataclass(frozen=True)
class Err:
    """Failed result carrying a :class:`GeometryError`."""

    error: GeometryError

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self):
        raise self.error

    def unwrap_or(self, default):
        return default

    def map(self, fn) -> "Err":
        return self

    def and_then(self, fn) -> "Err":
        return self


Result = Union[Ok[T], Err]


def collect(results: Iterable[Result[T]]) -> Result[List[T]]:
    """Turn results into a result of a list; the first error wins."""

    values: List[T] = []
    for result in results:
        if isinstance(result, Err):
            return result
        values.append(result.value)
    return Ok(values)


__all__ = ["Ok", "Err", "Result", "collect"]
