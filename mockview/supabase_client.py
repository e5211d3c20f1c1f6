from functools import lru_cache
from supabase import Client, create_client
from mockview.config import SUPABASE_URL, SUPABASE_ANON_KEY, SUPABASE_SERVICE_ROLE_KEY


def get_supabase() -> Client:
    """Anon client for user-facing auth calls, created per request."""
    if not SUPABASE_URL or not SUPABASE_ANON_KEY:
        raise RuntimeError("Supabase is not configured")
    return create_client(SUPABASE_URL, SUPABASE_ANON_KEY)


@lru_cache(maxsize=1)
def get_supabase_admin() -> Client:
    """Service-role client for admin auth operations."""
    if not SUPABASE_URL or not SUPABASE_SERVICE_ROLE_KEY:
        raise RuntimeError("Supabase admin client is not configured")
    return create_client(SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY)
