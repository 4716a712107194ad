"""
Copy JSON fixture files (data/<table>.json) into record store tables.

Fixture rows use the site's camelCase keys; tables use snake_case columns.
Rows whose id already exists in the target table are skipped, so the
migration can be re-run safely.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from tourdesk.exceptions import StoreError
from tourdesk.logging_config import get_logger

logger = get_logger(__name__)

_CAMEL = re.compile(r"(?<!^)(?=[A-Z])")

# Columns whose name is not the plain snake_case of the fixture key
KEY_OVERRIDES: Dict[str, Dict[str, str]] = {
    "tours": {"groupSize": "groupsize"},
}

TABLE_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "tours": {
        "transportation": "Air conditioned car or van",
        "groupsize": "Private / Group Tour",
        "difficulty": "Moderate",
        "status": "active",
        "featured": False,
    },
    "destinations": {"status": "active"},
    "users": {"role": "customer", "status": "active"},
}

BATCH_SIZE = 100


@dataclass
class MigrationReport:
    table: str
    total: int = 0
    migrated: int = 0
    skipped: int = 0
    errors: List[Dict[str, str]] = field(default_factory=list)


def snake_case(key: str) -> str:
    return _CAMEL.sub("_", key).lower()


def to_row(table: str, item: Dict[str, Any]) -> Dict[str, Any]:
    overrides = KEY_OVERRIDES.get(table, {})
    row = {overrides.get(k, snake_case(k)): v for k, v in item.items()}
    for column, default in TABLE_DEFAULTS.get(table, {}).items():
        if row.get(column) in (None, ""):
            row[column] = default
    return row


def load_fixture(data_dir, table: str) -> List[Dict[str, Any]]:
    path = Path(data_dir) / f"{table}.json"
    if not path.exists():
        raise FileNotFoundError(f"No fixture file found at {path}")
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON array")
    return data


def migrate_fixture(store, table: str, data_dir) -> MigrationReport:
    items = load_fixture(data_dir, table)
    report = MigrationReport(table=table, total=len(items))

    existing_ids = {row.get("id") for row in store.select(table)}
    pending = []
    for item in items:
        if item.get("id") in existing_ids:
            report.skipped += 1
            continue
        pending.append(to_row(table, item))

    for start in range(0, len(pending), BATCH_SIZE):
        batch = pending[start:start + BATCH_SIZE]
        try:
            store.upsert(table, batch)
            report.migrated += len(batch)
        except StoreError as e:
            logger.error("fixture_batch_failed", table=table, offset=start, error=str(e))
            report.errors.extend(
                {"id": str(row.get("id")), "error": str(e)} for row in batch
            )

    logger.info(
        "fixture_migrated",
        table=table,
        total=report.total,
        migrated=report.migrated,
        skipped=report.skipped,
        errors=len(report.errors),
    )
    return report
