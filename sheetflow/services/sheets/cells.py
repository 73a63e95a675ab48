"""Cell value helpers shared by the sheet transformers."""

from __future__ import annotations

from typing import Any, Sequence

CellValue = Any
Row = Sequence[CellValue]
Grid = Sequence[Row]


def is_empty(value: CellValue) -> bool:
    """Return True for ``None`` and the empty string only.

    ``0`` and ``False`` are real cell values and are not empty.
    """

    if value is None:
        return True
    return isinstance(value, str) and value == ""


def key_text(value: CellValue) -> str:
    """Render a cell value as a mapping key the way the sheet displays it."""

    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def cell_at(row: Row, index: int) -> CellValue:
    """Return ``row[index]`` or ``None`` when the row is too short."""

    if index < len(row):
        return row[index]
    return None


__all__ = ["CellValue", "Grid", "Row", "cell_at", "is_empty", "key_text"]
