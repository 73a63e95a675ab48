"""Simple TTL key-value caches for serialized context trees.

Entries expire after their TTL and then read as misses; expired entries are
dropped lazily on access. Nothing is ever invalidated explicitly: a changed
key simply leaves the old entry unreachable until it expires.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from sheetflow.core.errors import CacheError
from sheetflow.core.logger import get_logger

LOGGER = get_logger()


class CacheStore(Protocol):
    """Contract used by the context service."""

    def get(self, key: str) -> str | None:
        """Return the cached value or ``None`` when missing or expired."""

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store ``value`` under ``key`` for ``ttl_seconds``."""

    def remove(self, key: str) -> None:
        """Drop ``key`` if present."""


@dataclass(slots=True)
class CacheEntry:
    value: str
    expires_at: float


class MemoryCache:
    """Process-local cache using the monotonic clock."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= time.monotonic():
                del self._entries[key]
                return None
            return entry.value

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise CacheError(f"ttl must be positive, got {ttl_seconds}")
        with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=time.monotonic() + ttl_seconds)

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def __len__(self) -> int:  # pragma: no cover - trivial
        return len(self._entries)


class JsonFileCache:
    """Cache persisted to a JSON file so entries survive between CLI runs.

    Uses wall-clock expiry because the monotonic clock resets per process.
    """

    def __init__(self, path: Path, *, logger: logging.Logger | None = None) -> None:
        self._path = Path(path)
        self._lock = threading.RLock()
        self._logger = logger or LOGGER

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> str | None:
        with self._lock:
            entries = self._read()
            raw = entries.get(key)
            if raw is None:
                return None
            if float(raw.get("expires_at", 0)) <= time.time():
                del entries[key]
                self._write(entries)
                self._logger.info("sheetflow.cache expired key=%s", key)
                return None
            return str(raw.get("value"))

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise CacheError(f"ttl must be positive, got {ttl_seconds}")
        with self._lock:
            entries = self._read()
            now = time.time()
            entries = {k: v for k, v in entries.items() if float(v.get("expires_at", 0)) > now}
            entries[key] = {"value": value, "expires_at": now + ttl_seconds}
            self._write(entries)

    def remove(self, key: str) -> None:
        with self._lock:
            entries = self._read()
            if entries.pop(key, None) is not None:
                self._write(entries)

    def _read(self) -> dict[str, dict[str, object]]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as exc:
            raise CacheError(f"cache file unreadable: {self._path}") from exc
        if not isinstance(data, dict):
            raise CacheError(f"cache file must hold an object: {self._path}")
        return {str(k): v for k, v in data.items() if isinstance(v, dict)}

    def _write(self, entries: dict[str, dict[str, object]]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp.write_text(json.dumps(entries, ensure_ascii=False), encoding="utf-8")
            tmp.replace(self._path)
        except OSError as exc:
            raise CacheError(f"cache file not writable: {self._path}") from exc


__all__ = ["CacheEntry", "CacheStore", "JsonFileCache", "MemoryCache"]
