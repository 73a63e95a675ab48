"""Epics sheet edit handling: extract the row, enrich with context, deliver."""

from __future__ import annotations

import json
import logging

from sheetflow.config import Settings
from sheetflow.core.logger import debug_log, get_logger
from sheetflow.core.outcome import EditOutcome
from sheetflow.services.context import ContextService
from sheetflow.services.sheets import EditEvent
from sheetflow.services.webhook import WebhookClient

from .assembler import Payload, TriggerMeta, assemble
from .mapper import RowObject, map_row
from .trigger import is_target_trigger

LOGGER = get_logger()

EPICS_SHEET = "Epics"
GROOM_EPICS_OPERATION = "GROOM_EPICS"


class EpicsHandler:
    """Turns a ``Groom EPIC`` edit into a webhook delivery."""

    def __init__(
        self,
        settings: Settings,
        context_service: ContextService,
        webhook_client: WebhookClient,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._settings = settings
        self._context = context_service
        self._webhook = webhook_client
        self._logger = logger or LOGGER

    def handle(self, event: EditEvent, *, dry_run: bool = False) -> EditOutcome:
        debug_log(self._settings, "Handling Epics sheet edit")
        if not is_target_trigger(event.column, event.value):
            return EditOutcome(sheet=event.sheet_name, action="skipped", detail="not a Groom EPIC trigger")

        payload = self.build_payload(event)
        debug_log(self._settings, f"Final Epics JSON: {json.dumps(payload, ensure_ascii=False)}", True)
        if dry_run:
            return EditOutcome(sheet=event.sheet_name, action="dry_run", detail="payload not sent", payload=payload)

        result = self._webhook.send(GROOM_EPICS_OPERATION, payload)
        return EditOutcome(
            sheet=event.sheet_name,
            action="webhook_sent",
            detail=f"status={result.status_code} attempts={result.attempts}",
            payload=payload,
        )

    def build_payload(self, event: EditEvent) -> Payload:
        row_data = self.event_row_data(event)
        context = self._context.get_context(event.spreadsheet)
        meta = TriggerMeta(
            spreadsheet_id=event.spreadsheet.id,
            sheet_name=event.sheet_name,
            row=event.row,
            user=event.user,
            modified_at=event.timestamp,
        )
        return assemble(row_data, context, meta)

    def event_row_data(self, event: EditEvent) -> RowObject:
        debug_log(self._settings, "Getting event row data")
        sheet = event.spreadsheet.require_sheet(event.sheet_name)
        return map_row(sheet.header_values(), sheet.row_values(event.row))

    def close(self) -> None:
        self._webhook.close()


__all__ = ["EPICS_SHEET", "GROOM_EPICS_OPERATION", "EpicsHandler"]
