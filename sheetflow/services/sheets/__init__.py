"""Spreadsheet access and edit events."""

from .cells import CellValue, Grid, Row, cell_at, is_empty, key_text
from .events import EditEvent
from .workbook import SheetTable, Spreadsheet, load_workbook

__all__ = [
    "CellValue",
    "EditEvent",
    "Grid",
    "Row",
    "SheetTable",
    "Spreadsheet",
    "cell_at",
    "is_empty",
    "key_text",
    "load_workbook",
]
