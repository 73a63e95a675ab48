"""Webhook payload assembly for the Epics pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping

from sheetflow.core.logger import get_logger
from sheetflow.core.results import Err, ErrorKind, Ok, Result, error_from_exception, unwrap_or
from sheetflow.services.sheets.cells import is_empty

LOGGER = get_logger()

Payload = Dict[str, Any]


@dataclass(frozen=True, slots=True)
class TriggerMeta:
    """Edit metadata copied into the payload."""

    spreadsheet_id: str
    sheet_name: str
    row: int
    user: str
    modified_at: datetime


def to_iso_timestamp(moment: datetime) -> str:
    """Format ``moment`` as UTC ISO-8601 with milliseconds, e.g. ``2024-05-10T08:00:00.000Z``."""

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    utc = moment.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def build_payload(
    row_object: Mapping[str, Any] | None,
    context_tree: Mapping[str, Any] | None,
    trigger_meta: TriggerMeta | None = None,
) -> Result[Payload]:
    if row_object is None:
        return Err(ErrorKind.MISSING_INPUT, "row object is required")
    try:
        payload: Payload = {
            "context": context_tree,
            "eventData": {},
        }
        if trigger_meta is not None:
            payload["gsheet_id"] = trigger_meta.spreadsheet_id
            payload["sheet_name_id"] = trigger_meta.sheet_name
            payload["row_id"] = trigger_meta.row
            payload["user_id"] = trigger_meta.user
            payload["modify_time"] = to_iso_timestamp(trigger_meta.modified_at)
        for key, value in row_object.items():
            if not is_empty(value):
                payload["eventData"][key] = value
        return Ok(payload)
    except Exception as exc:  # noqa: BLE001 - reported as Err
        return error_from_exception(exc)


def assemble(
    row_object: Mapping[str, Any] | None,
    context_tree: Mapping[str, Any] | None,
    trigger_meta: TriggerMeta | None = None,
) -> Payload:
    """Combine row data, context and trigger metadata; ``{}`` on failure.

    ``eventData`` keeps every row field that is not ``None`` or ``""``, so
    ``0`` and ``False`` survive. The context tree is passed through as given.
    """

    result = build_payload(row_object, context_tree, trigger_meta)
    if isinstance(result, Err):
        LOGGER.error("sheetflow.epics assemble_failed kind=%s error=%s", result.kind.value, result.message)
    return unwrap_or(result, {})


__all__ = ["Payload", "TriggerMeta", "assemble", "build_payload", "to_iso_timestamp"]
