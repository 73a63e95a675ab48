from __future__ import annotations

from typing import Any

TRIGGER_COLUMN = 10  # column J, 1-based
TRIGGER_VALUE = "Groom EPIC"


def is_target_trigger(edited_column: int, edited_value: Any) -> bool:
    """Return True only for the exact sentinel written to column J."""

    return edited_column == TRIGGER_COLUMN and isinstance(edited_value, str) and edited_value == TRIGGER_VALUE


__all__ = ["TRIGGER_COLUMN", "TRIGGER_VALUE", "is_target_trigger"]
