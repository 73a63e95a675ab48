from __future__ import annotations

from typing import Any, Dict, Sequence

from sheetflow.core.logger import get_logger
from sheetflow.core.results import Err, ErrorKind, Ok, Result, error_from_exception, unwrap_or
from sheetflow.services.sheets.cells import cell_at, key_text

LOGGER = get_logger()

RowObject = Dict[str, Any]


def build_row_object(headers: Sequence[Any] | None, row: Sequence[Any] | None) -> Result[RowObject]:
    if headers is None or row is None:
        return Err(ErrorKind.MISSING_INPUT, "headers and row are required")
    try:
        # Short rows resolve to None; values beyond the headers are ignored.
        return Ok({key_text(header): cell_at(row, index) for index, header in enumerate(headers)})
    except Exception as exc:  # noqa: BLE001 - reported as Err
        return error_from_exception(exc)


def map_row(headers: Sequence[Any] | None, row: Sequence[Any] | None) -> RowObject:
    """Zip ``headers`` with ``row``; ``{}`` when the inputs cannot be mapped."""

    result = build_row_object(headers, row)
    if isinstance(result, Err):
        LOGGER.error("sheetflow.epics map_row_failed kind=%s error=%s", result.kind.value, result.message)
    return unwrap_or(result, {})


__all__ = ["RowObject", "build_row_object", "map_row"]
