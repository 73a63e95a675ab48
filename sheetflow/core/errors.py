"""Custom exceptions used across SheetFlow."""

from __future__ import annotations

from typing import Any


class SheetFlowError(Exception):
    """Base error for the application."""


class ConfigError(SheetFlowError):
    """Configuration related error."""


class WorkbookError(SheetFlowError):
    """Raised when a workbook cannot be read."""


class SheetNotFoundError(WorkbookError):
    """Raised when a named sheet is missing from the spreadsheet."""


class CacheError(SheetFlowError):
    """Raised when the cache backend cannot be read or written."""


class WebhookError(SheetFlowError):
    """Raised when a webhook delivery fails."""

    def __init__(self, message: str, *, status_code: int | None = None, payload: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload or {}
