"""Database package."""

from gello.db.session import (
    close_supabase,
    get_access_token,
    get_auth_client,
    get_db,
    get_service_db,
    init_supabase,
)
from gello.db.supabase import AuthSession, Database, SupabaseAuth, SupabaseProvider

__all__ = [
    "AuthSession",
    "Database",
    "SupabaseAuth",
    "SupabaseProvider",
    "close_supabase",
    "get_access_token",
    "get_auth_client",
    "get_db",
    "get_service_db",
    "init_supabase",
]
