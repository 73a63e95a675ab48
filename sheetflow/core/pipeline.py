from __future__ import annotations

import logging
from pathlib import Path

import requests

from sheetflow.config import Settings
from sheetflow.services.cache import CacheStore, JsonFileCache, MemoryCache
from sheetflow.services.context import CONTEXT_SHEET, ContextService
from sheetflow.services.epics import EPICS_SHEET, EpicsHandler
from sheetflow.services.sheets import EditEvent
from sheetflow.services.webhook import WebhookClient

from .errors import SheetFlowError
from .logger import debug_log, get_logger
from .outcome import EditOutcome
from .workspace import _work_dir


def build_cache(settings: Settings, *, persistent: bool = False) -> CacheStore:
    """Return the file cache from settings when ``persistent``; otherwise memory."""

    if persistent and settings.cache.path:
        path = Path(settings.cache.path)
        if not path.is_absolute():
            path = _work_dir() / path
        return JsonFileCache(path)
    return MemoryCache()


class EditRouter:
    """Routes sheet edits to the Context and Epics handlers."""

    def __init__(
        self,
        settings: Settings,
        context_service: ContextService,
        epics_handler: EpicsHandler,
        logger: logging.Logger | None = None,
    ) -> None:
        self.settings = settings
        self.context_service = context_service
        self.epics_handler = epics_handler
        self.logger = logger or get_logger()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        cache: CacheStore | None = None,
        session: requests.Session | None = None,
    ) -> "EditRouter":
        context_service = ContextService(settings, cache or build_cache(settings))
        webhook = WebhookClient(settings, session=session)
        return cls(settings, context_service, EpicsHandler(settings, context_service, webhook))

    def handle_edit(self, event: EditEvent, *, dry_run: bool = False) -> EditOutcome:
        """Dispatch ``event`` by sheet name. Errors are logged, never raised."""

        debug_log(self.settings, "Handling edit event")
        try:
            if event.sheet_name == CONTEXT_SHEET:
                tree = self.context_service.refresh(event.spreadsheet)
                return EditOutcome(
                    sheet=event.sheet_name,
                    action="context_cached",
                    detail=f"{len(tree)} top-level keys",
                    payload=tree,
                )
            if event.sheet_name == EPICS_SHEET:
                return self.epics_handler.handle(event, dry_run=dry_run)
        except SheetFlowError as exc:
            self.logger.error("sheetflow.edit failed sheet=%s error=%s", event.sheet_name, exc, exc_info=True)
            return EditOutcome(sheet=event.sheet_name, action="failed", detail=str(exc))
        except Exception as exc:  # noqa: BLE001 - the edit trigger must not crash
            self.logger.error("sheetflow.edit unexpected sheet=%s error=%s", event.sheet_name, exc, exc_info=True)
            return EditOutcome(sheet=event.sheet_name, action="failed", detail=f"{type(exc).__name__}: {exc}")
        return EditOutcome(sheet=event.sheet_name, action="ignored", detail="no handler for sheet")

    def close(self) -> None:
        """Release the webhook HTTP session."""

        self.epics_handler.close()
