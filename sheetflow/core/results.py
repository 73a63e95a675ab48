"""Explicit success/failure values for fail-soft operations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Failure classes reported by core operations."""

    MISSING_INPUT = "missing_input"
    INVALID_INPUT = "invalid_input"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True, slots=True)
class Err:
    kind: ErrorKind
    message: str = ""


Result = Union[Ok[T], Err]


def unwrap_or(result: "Result[T]", default: T) -> T:
    """Return the wrapped value or ``default`` for an ``Err``."""

    if isinstance(result, Ok):
        return result.value
    return default


def error_from_exception(exc: BaseException) -> Err:
    """Classify an exception raised while processing input data."""

    kind = ErrorKind.UNEXPECTED
    if isinstance(exc, (TypeError, ValueError, IndexError, KeyError)):
        kind = ErrorKind.INVALID_INPUT
    return Err(kind=kind, message=f"{type(exc).__name__}: {exc}")


__all__ = ["ErrorKind", "Ok", "Err", "Result", "unwrap_or", "error_from_exception"]
