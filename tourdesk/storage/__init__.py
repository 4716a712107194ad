"""Record storage: Supabase when configured, JSON files otherwise."""
from tourdesk.config.settings import Settings
from tourdesk.logging_config import get_logger
from .base import RecordStore, Row
from .json_store import JsonFileStore
from .supabase_store import SupabaseRecordStore

logger = get_logger(__name__)


def get_record_store(settings: Settings) -> RecordStore:
    if settings.supabase_configured:
        from tourdesk.supabase import get_supabase_admin_client
        return SupabaseRecordStore(get_supabase_admin_client(settings))

    logger.warning("supabase_not_configured", fallback_dir=settings.DATA_DIR)
    return JsonFileStore(settings.DATA_DIR)


__all__ = ["RecordStore", "Row", "JsonFileStore", "SupabaseRecordStore", "get_record_store"]
