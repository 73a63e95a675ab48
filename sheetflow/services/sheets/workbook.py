"""Spreadsheet access backed by local Excel workbooks."""

# Module responsibilities:
# - Hold sheet grids the way a spreadsheet service hands them out (data range only).
# - Load every sheet of an .xlsx file through pandas.read_excel (openpyxl engine).
# - Normalise pandas cell types into plain Python/JSON values.

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Iterable, Mapping

import pandas as pd

from sheetflow.core.errors import SheetNotFoundError, WorkbookError
from sheetflow.core.logger import get_logger

from .cells import CellValue, is_empty

LOGGER = get_logger()


@dataclass(slots=True)
class SheetTable:
    """One named sheet; rows are trimmed to the populated data range."""

    name: str
    rows: list[list[CellValue]] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.rows = _trim_grid(self.rows)

    def get_values(self) -> list[list[CellValue]]:
        """Return a copy of the data range, each row padded to ``last_column()``."""

        width = self.last_column()
        return [_pad(row, width) for row in self.rows]

    def last_row(self) -> int:
        """Return the 1-based number of the last row holding data (0 when empty)."""

        return len(self.rows)

    def last_column(self) -> int:
        return max((len(row) for row in self.rows), default=0)

    def header_values(self) -> list[CellValue]:
        return self.row_values(1)

    def row_values(self, row_number: int) -> list[CellValue]:
        """Return the 1-based ``row_number`` padded to ``last_column()`` with ``""``."""

        if row_number < 1:
            raise WorkbookError(f"row numbers start at 1, got {row_number}")
        width = self.last_column()
        if row_number > len(self.rows):
            return [""] * width
        return _pad(self.rows[row_number - 1], width)

    def cell(self, row_number: int, column: int) -> CellValue:
        if column < 1:
            raise WorkbookError(f"column numbers start at 1, got {column}")
        values = self.row_values(row_number)
        if column > len(values):
            return ""
        return values[column - 1]


@dataclass(slots=True)
class Spreadsheet:
    """A spreadsheet identity plus its sheets keyed by name."""

    id: str
    sheets: dict[str, SheetTable] = field(default_factory=dict)

    @classmethod
    def from_grids(cls, spreadsheet_id: str, grids: Mapping[str, Iterable[Iterable[CellValue]]]) -> "Spreadsheet":
        sheets = {name: SheetTable(name=name, rows=[list(row) for row in grid]) for name, grid in grids.items()}
        return cls(id=spreadsheet_id, sheets=sheets)

    def get_sheet_by_name(self, name: str) -> SheetTable | None:
        return self.sheets.get(name)

    def require_sheet(self, name: str) -> SheetTable:
        """Return the sheet or raise ``SheetNotFoundError``."""

        sheet = self.sheets.get(name)
        if sheet is None:
            raise SheetNotFoundError(f"Sheet not found: {name}")
        return sheet

    def sheet_data(self, name: str) -> list[list[CellValue]]:
        """Return the data range of the named sheet."""

        return self.require_sheet(name).get_values()


def load_workbook(path: Path, spreadsheet_id: str | None = None) -> Spreadsheet:
    """Load every sheet of an Excel workbook into a ``Spreadsheet``.

    Args:
        path: Path to the ``.xlsx`` workbook.
        spreadsheet_id: Identity used for cache keys and payloads; defaults
            to the file stem.

    Raises:
        WorkbookError: When the file is missing or pandas cannot parse it.
    """

    path = Path(path)
    if not path.exists():
        raise WorkbookError(f"Source workbook not found: {path}")

    LOGGER.info("sheetflow.workbook reading path=%s", path)
    try:
        frames = pd.read_excel(path, sheet_name=None, header=None, dtype=object)
    except (ValueError, OSError) as exc:
        raise WorkbookError(f"Failed to read workbook {path}: {exc}") from exc

    sheets: dict[str, SheetTable] = {}
    for name, frame in frames.items():
        rows = [[_normalize_cell(value) for value in record] for record in frame.itertuples(index=False, name=None)]
        sheets[str(name)] = SheetTable(name=str(name), rows=rows)
        LOGGER.info(
            "sheetflow.workbook sheet_loaded name=%s rows=%d columns=%d",
            name,
            sheets[str(name)].last_row(),
            sheets[str(name)].last_column(),
        )
    return Spreadsheet(id=spreadsheet_id or path.stem, sheets=sheets)


def _normalize_cell(value: Any) -> CellValue:
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    if value is pd.NaT:
        return ""
    if isinstance(value, pd.Timestamp):
        return value.isoformat()
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        # numpy scalars
        return value.item()
    return value


def _pad(row: list[CellValue], width: int) -> list[CellValue]:
    if len(row) >= width:
        return list(row)
    return list(row) + [""] * (width - len(row))


def _trim_grid(rows: list[list[CellValue]]) -> list[list[CellValue]]:
    trimmed = [list(row) for row in rows]
    while trimmed and all(is_empty(value) for value in trimmed[-1]):
        trimmed.pop()
    width = 0
    for row in trimmed:
        for index in range(len(row) - 1, -1, -1):
            if not is_empty(row[index]):
                width = max(width, index + 1)
                break
    return [row[:width] for row in trimmed]


__all__ = ["SheetTable", "Spreadsheet", "load_workbook"]
