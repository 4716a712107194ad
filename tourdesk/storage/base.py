from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

Row = Dict[str, Any]


class RecordStore(Protocol):
    """
    Table-oriented record store.

    Filters are equality matches on columns. Every method returns plain dict
    rows and raises StoreError when the backend fails.
    """

    def select(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Row]:
        ...

    def get(self, table: str, record_id: str) -> Optional[Row]:
        ...

    def insert(self, table: str, row: Row) -> Row:
        ...

    def update(self, table: str, filters: Dict[str, Any], values: Row) -> List[Row]:
        ...

    def delete(self, table: str, filters: Dict[str, Any]) -> List[Row]:
        ...

    def upsert(self, table: str, rows: List[Row]) -> List[Row]:
        ...
