from datetime import datetime, timezone
from typing import Optional, Dict, Any

from tourdesk.exceptions import StoreError
from tourdesk.logging_config import get_logger

logger = get_logger(__name__)

AUDIT_TABLE = "audit_logs"


def log_audit(
    store,
    action: str,
    resource_type: str,
    resource_id: Optional[str] = None,
    user_id: Optional[str] = None,
    changes: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
):
    """
    Record an audit log entry for security-relevant events.
    """
    entry = {
        "action": action,
        "resource_type": resource_type,
        "resource_id": resource_id,
        "user_id": user_id,
        "changes": changes,
        "ip_address": ip_address,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    logger.info("audit", **{k: v for k, v in entry.items() if k != "created_at"})
    try:
        store.insert(AUDIT_TABLE, entry)
    except StoreError as e:
        # Audit logging should not break the main flow, but we should log the error
        logger.error("audit_log_write_failed", action=action, error=str(e))
