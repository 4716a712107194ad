"""
RecordStore backed by the Supabase (PostgREST) table API.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from supabase import Client

from tourdesk.exceptions import StoreError
from tourdesk.logging_config import get_logger
from .base import Row

logger = get_logger(__name__)


def _apply_filters(query, filters: Optional[Dict[str, Any]]):
    for column, value in (filters or {}).items():
        # eq() against NULL never matches in PostgREST
        query = query.is_(column, "null") if value is None else query.eq(column, value)
    return query


class SupabaseRecordStore:
    name = "supabase"

    def __init__(self, client: Client):
        self.client = client

    def _execute(self, op: str, table: str, query) -> List[Row]:
        try:
            res = query.execute()
        except Exception as e:
            logger.error("supabase_query_failed", op=op, table=table, error=str(e))
            raise StoreError(f"Supabase {op} on '{table}' failed: {e}") from e
        return list(res.data or [])

    def select(self, table, filters=None, limit=None, order_by=None, descending=False) -> List[Row]:
        query = _apply_filters(self.client.table(table).select("*"), filters)
        if order_by:
            query = query.order(order_by, desc=descending)
        if limit:
            query = query.limit(limit)
        return self._execute("select", table, query)

    def get(self, table: str, record_id: str) -> Optional[Row]:
        rows = self.select(table, {"id": record_id}, limit=1)
        return rows[0] if rows else None

    def insert(self, table: str, row: Row) -> Row:
        rows = self._execute("insert", table, self.client.table(table).insert(row))
        return rows[0] if rows else dict(row)

    def update(self, table: str, filters: Dict[str, Any], values: Row) -> List[Row]:
        query = _apply_filters(self.client.table(table).update(values), filters)
        return self._execute("update", table, query)

    def delete(self, table: str, filters: Dict[str, Any]) -> List[Row]:
        query = _apply_filters(self.client.table(table).delete(), filters)
        return self._execute("delete", table, query)

    def upsert(self, table: str, rows: List[Row]) -> List[Row]:
        if not rows:
            return []
        return self._execute("upsert", table, self.client.table(table).upsert(rows))
