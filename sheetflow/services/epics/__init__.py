"""Epics sheet pipeline."""

from .assembler import Payload, TriggerMeta, assemble, build_payload, to_iso_timestamp
from .handler import EPICS_SHEET, GROOM_EPICS_OPERATION, EpicsHandler
from .mapper import RowObject, build_row_object, map_row
from .trigger import TRIGGER_COLUMN, TRIGGER_VALUE, is_target_trigger

__all__ = [
    "EPICS_SHEET",
    "GROOM_EPICS_OPERATION",
    "EpicsHandler",
    "Payload",
    "RowObject",
    "TRIGGER_COLUMN",
    "TRIGGER_VALUE",
    "TriggerMeta",
    "assemble",
    "build_payload",
    "build_row_object",
    "is_target_trigger",
    "map_row",
    "to_iso_timestamp",
]
