"""
Ordered lookup of PayHere settings.

Each source answers get(key) for the recognised keys
(merchantId, merchantSecret, baseUrl, sandboxFlag); the chain returns the
first non-empty answer:

    environment -> settings record (id="main") -> data/site_settings.json
"""
from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol

from tourdesk.logging_config import get_logger

logger = get_logger(__name__)

SETTINGS_TABLE = "settings"
SETTINGS_ROW_ID = "main"

ENV_KEYS = {
    "merchantId": "PAYHERE_MERCHANT_ID",
    "merchantSecret": "PAYHERE_MERCHANT_SECRET",
    "baseUrl": "NEXT_PUBLIC_BASE_URL",
    "sandboxFlag": "PAYHERE_SANDBOX",
}

RECORD_COLUMNS = {
    "merchantId": "payhere_merchant_id",
    "merchantSecret": "payhere_merchant_secret",
    "baseUrl": "payhere_base_url",
    "sandboxFlag": "payhere_sandbox",
}

FILE_KEYS = {
    "merchantId": "payhereMerchantId",
    "merchantSecret": "payhereMerchantSecret",
    "baseUrl": "payhereBaseUrl",
    "sandboxFlag": "payhereSandbox",
}


class SettingsSource(Protocol):
    name: str

    def get(self, key: str) -> Optional[str]:
        ...


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    text = str(value).strip()
    return text or None


class EnvSource:
    name = "env"

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self.environ = os.environ if environ is None else environ

    def get(self, key: str) -> Optional[str]:
        env_key = ENV_KEYS.get(key)
        if not env_key:
            return None
        return _as_text(self.environ.get(env_key))


def payhere_env(settings) -> Dict[str, Any]:
    """PayHere values the Settings object loaded from the process env and .env."""
    return {env_key: getattr(settings, env_key, None) for env_key in ENV_KEYS.values()}


class RecordSettingsSource:
    """Settings row persisted in the record store. The row is read once per instance."""

    name = "record"

    def __init__(self, store):
        self.store = store
        self._row: Optional[Dict[str, Any]] = None
        self._loaded = False

    def _load(self) -> Dict[str, Any]:
        if not self._loaded:
            self._loaded = True
            self._row = self.store.get(SETTINGS_TABLE, SETTINGS_ROW_ID) or {}
        return self._row or {}

    def get(self, key: str) -> Optional[str]:
        column = RECORD_COLUMNS.get(key)
        if not column:
            return None
        return _as_text(self._load().get(column))


class FileSettingsSource:
    """JSON settings file written by the admin settings page."""

    name = "file"
    _lock = threading.Lock()

    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as f:
            return json.load(f)

    def save(self, data: Dict[str, Any]) -> None:
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp, self.path)

    def get(self, key: str) -> Optional[str]:
        file_key = FILE_KEYS.get(key)
        if not file_key:
            return None
        return _as_text(self.load().get(file_key))


class SettingsChain:
    """First non-empty value wins. A failing source is logged and skipped."""

    def __init__(self, sources: Iterable[SettingsSource]):
        self.sources = list(sources)

    def get(self, key: str) -> Optional[str]:
        for source in self.sources:
            try:
                value = source.get(key)
            except Exception as e:
                logger.warning("settings_source_failed", source=source.name, key=key, error=str(e))
                continue
            if value:
                return value
        return None


def default_chain(store, settings_file, environ: Optional[Mapping[str, str]] = None) -> SettingsChain:
    sources = [EnvSource(environ)]
    if store is not None:
        sources.append(RecordSettingsSource(store))
    sources.append(FileSettingsSource(settings_file))
    return SettingsChain(sources)
