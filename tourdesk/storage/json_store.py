"""
File-backed RecordStore used when Supabase is not configured.

One JSON array per table under the data directory (data/bookings.json, ...).
"""
from __future__ import annotations

import json
import os
import threading
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

from tourdesk.exceptions import StoreError
from tourdesk.logging_config import get_logger
from .base import Row

logger = get_logger(__name__)


def _matches(row: Row, filters: Optional[Dict[str, Any]]) -> bool:
    return all(row.get(k) == v for k, v in (filters or {}).items())


class JsonFileStore:
    name = "file"

    def __init__(self, data_dir):
        self.data_dir = Path(data_dir)
        self._lock = threading.RLock()

    def _path(self, table: str) -> Path:
        return self.data_dir / f"{table}.json"

    def _load(self, table: str) -> List[Row]:
        path = self._path(table)
        if not path.exists():
            return []
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("fallback_store_read_failed", table=table, error=str(e))
            raise StoreError(f"Cannot read {path}: {e}") from e
        if not isinstance(data, list):
            raise StoreError(f"{path} does not contain a JSON array")
        return data

    def _save(self, table: str, rows: List[Row]) -> None:
        path = self._path(table)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(".json.tmp")
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(rows, f, indent=2, default=str)
            os.replace(tmp, path)
        except OSError as e:
            logger.error("fallback_store_write_failed", table=table, error=str(e))
            raise StoreError(f"Cannot write {path}: {e}") from e

    def select(self, table, filters=None, limit=None, order_by=None, descending=False) -> List[Row]:
        with self._lock:
            rows = [dict(r) for r in self._load(table) if _matches(r, filters)]
        if order_by:
            rows.sort(key=lambda r: (r.get(order_by) is None, str(r.get(order_by) or "")), reverse=descending)
        if limit:
            rows = rows[:limit]
        return rows

    def get(self, table: str, record_id: str) -> Optional[Row]:
        rows = self.select(table, {"id": record_id}, limit=1)
        return rows[0] if rows else None

    def insert(self, table: str, row: Row) -> Row:
        new_row = dict(row)
        new_row.setdefault("id", str(uuid.uuid4()))
        with self._lock:
            rows = self._load(table)
            if any(r.get("id") == new_row["id"] for r in rows):
                raise StoreError(f"Duplicate id {new_row['id']} in '{table}'")
            rows.append(new_row)
            self._save(table, rows)
        return dict(new_row)

    def update(self, table: str, filters: Dict[str, Any], values: Row) -> List[Row]:
        updated = []
        with self._lock:
            rows = self._load(table)
            for row in rows:
                if _matches(row, filters):
                    row.update(values)
                    updated.append(dict(row))
            if updated:
                self._save(table, rows)
        return updated

    def delete(self, table: str, filters: Dict[str, Any]) -> List[Row]:
        with self._lock:
            rows = self._load(table)
            kept = [r for r in rows if not _matches(r, filters)]
            removed = [r for r in rows if _matches(r, filters)]
            if removed:
                self._save(table, kept)
        return removed

    def upsert(self, table: str, rows: List[Row]) -> List[Row]:
        result = []
        with self._lock:
            existing = self._load(table)
            index = {r.get("id"): i for i, r in enumerate(existing)}
            for row in rows:
                new_row = dict(row)
                new_row.setdefault("id", str(uuid.uuid4()))
                pos = index.get(new_row["id"])
                if pos is None:
                    index[new_row["id"]] = len(existing)
                    existing.append(new_row)
                else:
                    existing[pos] = {**existing[pos], **new_row}
                result.append(dict(existing[index[new_row["id"]]]))
            if rows:
                self._save(table, existing)
        return result
