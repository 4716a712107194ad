"""
Supabase client configuration for Tourdesk
Provides centralized Supabase client management
"""

from typing import Optional

from supabase import create_client, Client
from tourdesk.config.settings import Settings, settings as default_settings
from tourdesk.logging_config import get_logger

logger = get_logger(__name__)

# Global Supabase admin client instance
_supabase_admin_client: Optional[Client] = None


def get_supabase_admin_client(settings: Settings = default_settings) -> Client:
    """Get Supabase client with service role key for server-side operations"""
    global _supabase_admin_client

    if _supabase_admin_client is None:
        if not settings.supabase_configured:
            raise ValueError("Supabase URL and SERVICE_ROLE_KEY must be configured for admin operations")

        try:
            _supabase_admin_client = create_client(
                supabase_url=settings.SUPABASE_URL,
                supabase_key=settings.SUPABASE_SERVICE_ROLE_KEY
            )
            logger.info("supabase_admin_client_initialized")
        except Exception as e:
            logger.error("supabase_admin_client_failed", error=str(e))
            raise

    return _supabase_admin_client
