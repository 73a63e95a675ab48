"""Outbound webhook delivery."""

from __future__ import annotations

import json
import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Mapping

import requests
from requests import Response
from requests.exceptions import ConnectionError, RequestException, Timeout

from sheetflow.config import Settings, get_webhook_url
from sheetflow.core.errors import WebhookError
from sheetflow.core.logger import debug_log, get_logger

LOGGER = get_logger()

USER_AGENT = "SheetFlow-Webhook/1.0"
SUCCESS_STATUS = 200
RETRYABLE_STATUS = {429, 500, 502, 503, 504}


@dataclass(slots=True)
class DeliveryResult:
    """Outcome of a successful webhook POST."""

    url: str
    status_code: int
    attempts: int
    body: str


class WebhookClient:
    """POST JSON payloads to configured webhooks; only HTTP 200 counts as success."""

    def __init__(
        self,
        settings: Settings,
        *,
        session: requests.Session | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._settings = settings
        self._session = session or requests.Session()
        self._session.headers.setdefault("User-Agent", USER_AGENT)
        self._logger = logger or LOGGER

    @property
    def session(self) -> requests.Session:
        return self._session

    def send(self, operation: str, payload: Mapping[str, Any]) -> DeliveryResult:
        """Deliver ``payload`` to the webhook registered for ``operation``.

        Raises:
            WebhookError: When no URL is configured or delivery fails.
        """

        debug_log(self._settings, "Sending data to webhook")
        url = get_webhook_url(self._settings, operation)
        if not url:
            raise WebhookError("Webhook URL not found", payload={"operation": operation})
        return self.post_json(url, payload)

    def post_json(self, url: str, payload: Mapping[str, Any]) -> DeliveryResult:
        try:
            body = json.dumps(payload, ensure_ascii=False, allow_nan=False)
        except ValueError as exc:
            raise WebhookError(f"Payload is not valid JSON: {exc}") from exc
        debug_log(self._settings, f"Webhook URL: {self._redact_url(url)}", True)
        debug_log(self._settings, f"Payload: {body}", True)

        retries = self._settings.webhook.retries
        attempts = max(1, retries.max_attempts)
        base_backoff = max(0.05, retries.backoff_ms / 1000.0)
        max_backoff = max(base_backoff, retries.max_backoff_ms / 1000.0)
        timeout = self._settings.webhook.timeout_sec
        redacted = self._redact_url(url)

        last_error: WebhookError | None = None
        for attempt in range(1, attempts + 1):
            try:
                response = self._session.post(
                    url,
                    data=body.encode("utf-8"),
                    headers={"Content-Type": "application/json"},
                    timeout=timeout,
                )
            except Timeout as exc:
                last_error = WebhookError("Webhook request timed out", payload={"url": redacted})
                self._logger.warning("sheetflow.webhook timeout url=%s attempt=%d", redacted, attempt, exc_info=exc)
            except (ConnectionError, RequestException) as exc:
                last_error = WebhookError("Webhook request failed", payload={"url": redacted})
                self._logger.warning(
                    "sheetflow.webhook connection_error url=%s attempt=%d error=%s",
                    redacted,
                    attempt,
                    type(exc).__name__,
                    exc_info=exc,
                )
            else:
                status = response.status_code
                debug_log(self._settings, f"Webhook response: {status}", True)
                if status == SUCCESS_STATUS:
                    return DeliveryResult(url=redacted, status_code=status, attempts=attempt, body=response.text)
                last_error = WebhookError(
                    f"Webhook request failed with status {status}",
                    status_code=status,
                    payload=self._safe_json(response),
                )
                if status not in RETRYABLE_STATUS:
                    raise last_error
                self._logger.warning(
                    "sheetflow.webhook retryable_status url=%s status=%d attempt=%d", redacted, status, attempt
                )

            if attempt < attempts:
                self._sleep_with_backoff(base_backoff, max_backoff, attempt)

        if last_error is not None:
            raise last_error
        raise WebhookError("Exhausted retries", payload={"url": redacted})  # pragma: no cover

    def close(self) -> None:
        self._session.close()

    def _redact_url(self, url: str) -> str:
        if "?" in url:
            return url.split("?")[0]
        return url

    def _sleep_with_backoff(self, base: float, maximum: float, attempt: int) -> None:
        delay = min(maximum, base * (2 ** (attempt - 1)))
        jitter = random.uniform(0, delay / 2)
        time.sleep(delay + jitter)

    def _safe_json(self, response: Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            text = response.text
            if len(text) > 200:
                text = text[:200] + "..."
            return {"body": text}
        return data if isinstance(data, dict) else {"body": data}


__all__ = ["DeliveryResult", "WebhookClient", "RETRYABLE_STATUS", "USER_AGENT"]
