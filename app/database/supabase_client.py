import logging
from typing import Dict, Optional

from supabase import create_client, Client
from app.config import settings

logger = logging.getLogger(__name__)


class SupabaseClient:
    """Lazily created, process-wide Supabase clients keyed by API key kind."""

    _clients: Dict[str, Client] = {}

    @classmethod
    def _create(cls, kind: str, key: Optional[str]) -> Client:
        if kind not in cls._clients:
            if not settings.supabase_url or not key:
                raise RuntimeError(f"Supabase {kind} client is not configured")
            cls._clients[kind] = create_client(settings.supabase_url, key)
            logger.debug("Created Supabase %s client", kind)
        return cls._clients[kind]

    @classmethod
    def get_client(cls) -> Client:
        return cls._create("anon", settings.supabase_key)

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Falls back to the anon client when no key is set."""
        if settings.supabase_service_role_key:
            return cls._create("service", settings.supabase_service_role_key)
        return cls.get_client()

    @classmethod
    def reset_client(cls):
        cls._clients.clear()


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def check_connection(supabase: Client) -> bool:
    """Cheap readiness probe: one row from profiles."""
    try:
        supabase.table("profiles").select("id").limit(1).execute()
        return True
    except Exception as e:
        logger.warning("Supabase readiness check failed: %s", e)
        return False
