"""Edit trigger event model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from .cells import CellValue
from .workbook import Spreadsheet


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class EditEvent:
    """A single-cell edit delivered by the edit trigger.

    Attributes:
        spreadsheet: The spreadsheet the edit happened in.
        sheet_name: Name of the active (edited) sheet.
        row: 1-based row of the edited cell.
        column: 1-based column of the edited cell.
        value: New cell value.
        user: Identity (email) of the acting user.
        timestamp: When the edit happened.
    """

    spreadsheet: Spreadsheet
    sheet_name: str
    row: int
    column: int
    value: CellValue = ""
    user: str = ""
    timestamp: datetime = field(default_factory=_utcnow)


__all__ = ["EditEvent"]
