from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from sheetflow.config import DEFAULT_CACHE_TTL_SECONDS, Settings, get_webhook_url, load_settings
from sheetflow.core.errors import ConfigError
from sheetflow.core.logger import debug_log, get_logger


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("SHEETFLOW_CONFIG", "SHEETFLOW_DEBUG", "SHEETFLOW_TEST_HOOK"):
        monkeypatch.delenv(name, raising=False)


class _ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.messages: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.messages.append(record.getMessage())


@pytest.fixture()
def captured() -> Iterator[_ListHandler]:
    handler = _ListHandler()
    logger = get_logger()
    logger.addHandler(handler)
    yield handler
    logger.removeHandler(handler)


def test_packaged_defaults() -> None:
    settings = load_settings()

    assert settings.debug is False
    assert settings.cache.ttl_seconds == DEFAULT_CACHE_TTL_SECONDS
    assert set(settings.webhooks) >= {"GROOM_EPICS", "GROOM_SUBTASKS"}
    assert settings.webhook.retries.max_attempts == 1


def test_local_override_is_merged(tmp_path: Path) -> None:
    base = tmp_path / "settings.yaml"
    base.write_text(
        "webhooks:\n  GROOM_EPICS: ''\n  GROOM_SUBTASKS: ''\ncache:\n  ttl_seconds: 60\n",
        encoding="utf-8",
    )
    (tmp_path / "settings.local.yaml").write_text(
        "webhooks:\n  GROOM_EPICS: https://hooks.example.test/epics\n",
        encoding="utf-8",
    )

    settings = load_settings(base)

    assert settings.webhooks == {"GROOM_EPICS": "https://hooks.example.test/epics", "GROOM_SUBTASKS": ""}
    assert settings.cache.ttl_seconds == 60


def test_env_references_expand(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("webhooks:\n  GROOM_EPICS: ${SHEETFLOW_TEST_HOOK}\n", encoding="utf-8")
    monkeypatch.setenv("SHEETFLOW_TEST_HOOK", "https://hooks.example.test/env")
    monkeypatch.setenv("SHEETFLOW_CONFIG", str(path))

    assert load_settings().webhooks["GROOM_EPICS"] == "https://hooks.example.test/env"


def test_unset_env_reference_fails(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("webhooks:\n  GROOM_EPICS: ${SHEETFLOW_TEST_HOOK}\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Environment variable not set"):
        load_settings(path)


def test_debug_env_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("debug: false\n", encoding="utf-8")
    monkeypatch.setenv("SHEETFLOW_DEBUG", "yes")
    assert load_settings(path).debug is True
    monkeypatch.setenv("SHEETFLOW_DEBUG", "0")
    assert load_settings(path).debug is False


@pytest.mark.parametrize(
    "content",
    [
        "webhooks: [unclosed\n",
        "- just\n- a list\n",
        "cache:\n  ttl_seconds: 0\n",
        "unknown_key: 1\n",
    ],
)
def test_invalid_settings_raise_config_error(tmp_path: Path, content: str) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(path)


def test_missing_settings_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_settings(tmp_path / "absent.yaml")


def test_get_webhook_url() -> None:
    settings = Settings(webhooks={"GROOM_EPICS": "  https://hooks.example.test/a  ", "GROOM_SUBTASKS": ""})

    assert get_webhook_url(settings, "GROOM_EPICS") == "https://hooks.example.test/a"
    assert get_webhook_url(settings, "GROOM_SUBTASKS") is None
    assert get_webhook_url(settings, "ESTIMATE_SUBTASKS") is None


def test_debug_log_respects_flag_and_force(captured: _ListHandler) -> None:
    quiet = Settings(debug=False)
    loud = Settings(debug=True)

    debug_log(quiet, "hidden")
    debug_log(quiet, "forced", True)
    debug_log(loud, "shown")

    assert captured.messages == ["forced", "shown"]
