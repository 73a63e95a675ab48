"""Best-effort JSON literal coercion for sheet values."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True, slots=True)
class Parsed:
    """The text was a JSON literal; ``value`` holds the decoded result."""

    value: Any


@dataclass(frozen=True, slots=True)
class Unparsed:
    """The value was kept as supplied."""

    original: Any


ParseOutcome = Union[Parsed, Unparsed]


def _reject_constant(token: str) -> Any:
    raise ValueError(f"non-standard JSON constant: {token}")


def _finite_float(token: str) -> float:
    number = float(token)
    if not math.isfinite(number):
        raise ValueError(f"number out of range: {token}")
    return number


def try_parse_json(value: Any) -> ParseOutcome:
    """Attempt to decode ``value`` as a JSON literal without raising.

    Only text is decoded. Numbers and booleans coming from the sheet are
    already native and are returned as ``Unparsed``. ``NaN``,
    ``Infinity`` and numbers that overflow a float (``1e400``) are rejected.
    """

    if not isinstance(value, str):
        return Unparsed(value)
    try:
        return Parsed(json.loads(value, parse_float=_finite_float, parse_constant=_reject_constant))
    except ValueError:
        return Unparsed(value)


def coerce_value(value: Any) -> Any:
    outcome = try_parse_json(value)
    if isinstance(outcome, Parsed):
        return outcome.value
    return outcome.original


__all__ = ["Parsed", "Unparsed", "ParseOutcome", "coerce_value", "try_parse_json"]
