"""Reshape the Context sheet grid into a nested context tree.

Layout of the Context sheet (row 1 is a header and is skipped)::

    A: collection   D: key   G: value

Rows missing a key or a value are dropped. Rows sharing a collection name are
grouped into one object; rows without a collection land at the top level and
win over a collection of the same name. Every leaf is then coerced from JSON
text where possible::

    Collection1 | Key1 | Value1          {"Collection1": {"Key1": "Value1"},
                | Key3 | 42       -->     "Key3": 42}
"""

from __future__ import annotations

from typing import Any, Dict

from sheetflow.core.logger import get_logger
from sheetflow.core.results import Err, ErrorKind, Ok, Result, error_from_exception, unwrap_or
from sheetflow.services.sheets.cells import Grid, cell_at, is_empty, key_text

from .coercion import coerce_value

LOGGER = get_logger()

COLLECTION_COLUMN = 0
KEY_COLUMN = 3
VALUE_COLUMN = 6

ContextTree = Dict[str, Any]


def build_context_tree(grid: Grid | None) -> Result[ContextTree]:
    """Build the context tree, reporting failures as ``Err`` instead of raising."""

    if grid is None:
        return Err(ErrorKind.MISSING_INPUT, "no grid data")
    try:
        grouped, flat = _collect_entries(grid)
        tree = _materialize(grouped, flat)
        return Ok(_coerce_tree(tree))
    except Exception as exc:  # noqa: BLE001 - reported as Err
        return error_from_exception(exc)


def transform(grid: Grid | None) -> ContextTree:
    """Return the context tree for ``grid``; ``{}`` when it cannot be built."""

    result = build_context_tree(grid)
    if isinstance(result, Err):
        LOGGER.error("sheetflow.context transform_failed kind=%s error=%s", result.kind.value, result.message)
    return unwrap_or(result, {})


def _collect_entries(grid: Grid) -> tuple[dict[str, list[tuple[str, Any]]], list[tuple[str, Any]]]:
    grouped: dict[str, list[tuple[str, Any]]] = {}
    flat: list[tuple[str, Any]] = []
    for row in list(grid)[1:]:
        collection = cell_at(row, COLLECTION_COLUMN)
        key = cell_at(row, KEY_COLUMN)
        value = cell_at(row, VALUE_COLUMN)
        if is_empty(key) or is_empty(value):
            continue
        if is_empty(collection):
            flat.append((key_text(key), value))
        else:
            grouped.setdefault(key_text(collection), []).append((key_text(key), value))
    return grouped, flat


def _materialize(grouped: dict[str, list[tuple[str, Any]]], flat: list[tuple[str, Any]]) -> ContextTree:
    tree: ContextTree = {collection: dict(pairs) for collection, pairs in grouped.items()}
    # Flat entries are applied last and replace a collection of the same name.
    tree.update(dict(flat))
    return tree


def _coerce_tree(tree: ContextTree) -> ContextTree:
    coerced: ContextTree = {}
    for key, value in tree.items():
        if isinstance(value, dict):
            coerced[key] = {sub_key: coerce_value(sub_value) for sub_key, sub_value in value.items()}
        else:
            coerced[key] = coerce_value(value)
    return coerced


__all__ = ["ContextTree", "build_context_tree", "transform"]
