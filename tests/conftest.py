from __future__ import annotations

import json
import os
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Keep log files out of the project workspace.
os.environ.setdefault("SHEETFLOW_HOME", tempfile.mkdtemp(prefix="sheetflow-tests-"))

from sheetflow.config import CacheSettings, RetrySettings, Settings, WebhookSettings  # noqa: E402
from sheetflow.services.sheets import Spreadsheet  # noqa: E402

HEADER = ["Header A", "Header B", "Header C", "Header D", "Header E", "Header F", "Header G"]

EPICS_HEADER = ["Epic", "Owner", "Points", "Blocked", "Notes", "Team", "Start", "End", "Link", "Action"]

WEBHOOK_URL = "https://hooks.example.test/groom?token=secret"


@dataclass
class MockResponse:
    status_code: int = 200
    json_data: Any = None
    text_data: str | None = None

    def json(self) -> Any:
        if self.json_data is None:
            raise ValueError("JSON body not set")
        return self.json_data

    @property
    def text(self) -> str:
        if self.text_data is not None:
            return self.text_data
        if self.json_data is not None:
            return json.dumps(self.json_data)
        return ""


class FakeSession:
    """Stands in for ``requests.Session``; queued items may be exceptions to raise."""

    def __init__(self, responses: list[MockResponse | Exception]) -> None:
        self._responses = responses
        self.headers: dict[str, str] = {}
        self.calls: list[tuple[str, str]] = []
        self.call_kwargs: list[dict[str, Any]] = []
        self.closed = False

    def post(self, url: str, **kwargs: Any) -> MockResponse:
        if not self._responses:
            raise AssertionError("No more responses queued")
        self.calls.append(("POST", url))
        self.call_kwargs.append(kwargs)
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def make_session() -> Callable[..., FakeSession]:
    def _factory(*responses: MockResponse | Exception) -> FakeSession:
        return FakeSession(list(responses))

    return _factory


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        webhooks={"GROOM_EPICS": WEBHOOK_URL, "GROOM_SUBTASKS": ""},
        debug=False,
        cache=CacheSettings(ttl_seconds=21600),
        webhook=WebhookSettings(
            timeout_sec=5.0,
            retries=RetrySettings(max_attempts=1, backoff_ms=1, max_backoff_ms=1),
        ),
    )


@pytest.fixture()
def context_grid() -> list[list[Any]]:
    return [
        list(HEADER),
        ["Collection1", "", "", "Key1", "", "", "Value1"],
        ["Collection1", "", "", "Key2", "", "", "Value2"],
        ["", "", "", "Key3", "", "", "Value3"],
        ["Collection2", "", "", "Key4", "", "", '{"nestedKey": "nestedValue"}'],
    ]


@pytest.fixture()
def epics_grid() -> list[list[Any]]:
    return [
        list(EPICS_HEADER),
        ["Checkout revamp", "dana@example.test", 8, False, "", "Payments", "2024-05-01", "", "", "Groom EPIC"],
        ["Search tuning", "", 0, True, "needs data", "Discovery", "", "", "", ""],
    ]


@pytest.fixture()
def spreadsheet(context_grid: list[list[Any]], epics_grid: list[list[Any]]) -> Spreadsheet:
    return Spreadsheet.from_grids("sheet-123", {"Context": context_grid, "Epics": epics_grid})
