"""Supabase handle lifecycle and FastAPI dependencies."""

from collections.abc import AsyncGenerator
from typing import Annotated

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from gello.config import get_settings
from gello.db.supabase import Database, SupabaseAuth, SupabaseProvider
from gello.exceptions import AuthenticationError

logger = structlog.get_logger()
settings = get_settings()
security = HTTPBearer(auto_error=False)


async def init_supabase(app: FastAPI) -> SupabaseProvider:
    """Create the Supabase handles and store them on ``app.state``."""
    provider = await SupabaseProvider.create(settings)
    app.state.supabase = provider
    return provider


async def close_supabase(app: FastAPI) -> None:
    """Close the Supabase handles and drop them from ``app.state``."""
    provider = getattr(app.state, "supabase", None)
    app.state.supabase = None
    if provider is not None:
        await provider.aclose()


def get_supabase(request: Request) -> SupabaseProvider:
    provider = getattr(request.app.state, "supabase", None)
    if provider is None:
        raise RuntimeError("Supabase provider is not initialized")
    return provider


def get_access_token(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str:
    """Caller's access token from the ``Authorization`` header or the session cookie."""
    if credentials and credentials.credentials:
        return credentials.credentials
    token = request.cookies.get(settings.access_token_cookie)
    if not token:
        raise AuthenticationError("Not authenticated")
    return token


async def get_db(
    token: Annotated[str, Depends(get_access_token)],
    provider: Annotated[SupabaseProvider, Depends(get_supabase)],
) -> AsyncGenerator[Database, None]:
    """Database handle scoped to the caller, so row-level security applies."""
    db = provider.database(token)
    try:
        yield db
    finally:
        await db.aclose()


async def get_service_db(
    provider: Annotated[SupabaseProvider, Depends(get_supabase)],
) -> AsyncGenerator[Database, None]:
    """Service-role database handle, used for account provisioning only."""
    db = provider.service_database()
    try:
        yield db
    finally:
        await db.aclose()


def get_auth_client(provider: Annotated[SupabaseProvider, Depends(get_supabase)]) -> SupabaseAuth:
    """Auth gateway for sign-up, sign-in, refresh and sign-out."""
    return provider.auth


# Type aliases for dependency injection
DB = Annotated[Database, Depends(get_db)]
ServiceDB = Annotated[Database, Depends(get_service_db)]
AuthClient = Annotated[SupabaseAuth, Depends(get_auth_client)]
