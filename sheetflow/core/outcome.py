from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(slots=True)
class EditOutcome:
    """What an edit handler did.

    ``action`` is one of ``context_cached``, ``webhook_sent``, ``dry_run``,
    ``skipped``, ``ignored`` or ``failed``.
    """

    sheet: str
    action: str
    detail: str = ""
    payload: dict[str, Any] | None = None

    @property
    def ok(self) -> bool:
        return self.action != "failed"
