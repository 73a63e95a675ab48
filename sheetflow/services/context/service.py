"""Context sheet handling: rebuild on edit and lazy cached reads."""

from __future__ import annotations

import json
import logging

from sheetflow.config import Settings
from sheetflow.core.errors import CacheError
from sheetflow.core.logger import debug_log, get_logger
from sheetflow.services.cache import CacheStore
from sheetflow.services.sheets import Spreadsheet

from .transformer import ContextTree, transform

LOGGER = get_logger()

CONTEXT_SHEET = "Context"
CACHE_KEY_PREFIX = "contextData"


def context_cache_key(spreadsheet: Spreadsheet) -> str:
    """Return ``contextData_<spreadsheetId>_<lastRow>`` for the Context sheet."""

    context_sheet = spreadsheet.require_sheet(CONTEXT_SHEET)
    return f"{CACHE_KEY_PREFIX}_{spreadsheet.id}_{context_sheet.last_row()}"


class ContextService:
    """Builds the context tree and keeps it in the TTL cache."""

    def __init__(self, settings: Settings, cache: CacheStore, *, logger: logging.Logger | None = None) -> None:
        self._settings = settings
        self._cache = cache
        self._logger = logger or LOGGER

    @property
    def ttl_seconds(self) -> int:
        return self._settings.cache.ttl_seconds

    def refresh(self, spreadsheet: Spreadsheet) -> ContextTree:
        """Rebuild the tree from the Context sheet and write it to the cache.

        Raises:
            SheetNotFoundError: When the spreadsheet has no Context sheet.
            CacheError: When the cache write fails or the tree is not valid JSON.
        """

        debug_log(self._settings, "Handling Context sheet edit")
        data = spreadsheet.sheet_data(CONTEXT_SHEET)
        tree = transform(data)
        key = context_cache_key(spreadsheet)
        serialized = _serialize(tree)
        self._cache.put(key, serialized, self.ttl_seconds)
        debug_log(self._settings, f"Final Context JSON: {serialized}", True)
        return tree

    def get_context(self, spreadsheet: Spreadsheet) -> ContextTree:
        """Return the cached tree, rebuilding it on a miss; ``{}`` on any failure."""

        try:
            key = context_cache_key(spreadsheet)
            cached = self._cache.get(key)
            if cached is None:
                debug_log(self._settings, "Context data not found in cache, retrieving from sheet")
                tree = transform(spreadsheet.sheet_data(CONTEXT_SHEET))
                self._cache.put(key, _serialize(tree), self.ttl_seconds)
                return tree
            tree = json.loads(cached)
            if not isinstance(tree, dict):
                raise CacheError(f"cached context for {key} is not an object")
            return tree
        except Exception as exc:  # noqa: BLE001 - callers expect an empty context
            self._logger.error("sheetflow.context get_context_failed error=%s", exc, exc_info=True)
            return {}


def _serialize(tree: ContextTree) -> str:
    try:
        return json.dumps(tree, ensure_ascii=False, allow_nan=False)
    except ValueError as exc:
        raise CacheError(f"context tree is not valid JSON: {exc}") from exc


__all__ = ["CONTEXT_SHEET", "ContextService", "context_cache_key"]
