"""Supabase data and auth gateways.

``SupabaseProvider`` is created once in the application lifespan. It owns the
SDK clients used for auth calls and hands out ``Database`` handles over
PostgREST. A handle built with a user's access token runs every query under
that user's row-level security; the service handle bypasses it and is reserved
for account provisioning and tooling.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, NoReturn
from uuid import UUID

import httpx
import orjson
import structlog
from postgrest import AsyncPostgrestClient
from postgrest.constants import DEFAULT_POSTGREST_CLIENT_HEADERS
from postgrest.exceptions import APIError
from supabase import AsyncClient, AsyncClientOptions, AuthApiError, AuthError, acreate_client

from gello.config import Settings
from gello.exceptions import DataServiceError, DuplicateUserError, InvalidCredentialsError

logger = structlog.get_logger()


def jsonable(values: Any) -> Any:
    """Coerce UUIDs, datetimes and enums into plain JSON values."""
    return orjson.loads(orjson.dumps(values))


def _filter_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, UUID):
        return str(value)
    return value


def _raise_data_error(exc: Exception, operation: str, target: str) -> NoReturn:
    if isinstance(exc, APIError):
        logger.error(
            "data_service_error",
            operation=operation,
            target=target,
            code=exc.code,
            error=exc.message,
        )
        raise DataServiceError(exc.message or "Data service error", service_code=exc.code) from exc
    logger.error("data_service_unreachable", operation=operation, target=target, error=str(exc))
    raise DataServiceError("Data service unavailable") from exc


class Database:
    """Thin async facade over a PostgREST client.

    All methods return plain dicts (or lists of dicts). ``match`` filters are
    equality filters; a ``None`` value matches ``IS NULL``.
    """

    def __init__(self, client: AsyncPostgrestClient):
        self.client = client

    def _apply_match(self, query: Any, match: dict[str, Any] | None) -> Any:
        for column, value in (match or {}).items():
            if value is None:
                query = query.is_(column, "null")
            else:
                query = query.eq(column, _filter_value(value))
        return query

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        match: dict[str, Any] | None = None,
        in_: dict[str, Iterable[Any]] | None = None,
        order_by: list[tuple[str, bool]] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Select rows. ``order_by`` is a list of ``(column, descending)`` pairs."""
        query = self._apply_match(self.client.from_(table).select(columns), match)
        for column, values in (in_ or {}).items():
            query = query.in_(column, [_filter_value(v) for v in values])
        for column, desc in order_by or []:
            query = query.order(column, desc=desc)
        if limit is not None:
            query = query.limit(limit)
        try:
            response = await query.execute()
        except (APIError, httpx.HTTPError) as exc:
            _raise_data_error(exc, "select", table)
        return list(response.data or [])

    async def select_one(self, table: str, *, columns: str = "*", **match: Any) -> dict[str, Any] | None:
        rows = await self.select(table, columns=columns, match=match, limit=1)
        return rows[0] if rows else None

    async def insert(self, table: str, values: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self.client.from_(table).insert(jsonable(values)).execute()
        except (APIError, httpx.HTTPError) as exc:
            _raise_data_error(exc, "insert", table)
        if not response.data:
            raise DataServiceError(f"Insert into {table} returned no row")
        return response.data[0]

    async def update(
        self, table: str, values: dict[str, Any], *, match: dict[str, Any]
    ) -> list[dict[str, Any]]:
        query = self._apply_match(self.client.from_(table).update(jsonable(values)), match)
        try:
            response = await query.execute()
        except (APIError, httpx.HTTPError) as exc:
            _raise_data_error(exc, "update", table)
        return list(response.data or [])

    async def delete(self, table: str, *, match: dict[str, Any]) -> list[dict[str, Any]]:
        query = self._apply_match(self.client.from_(table).delete(), match)
        try:
            response = await query.execute()
        except (APIError, httpx.HTTPError) as exc:
            _raise_data_error(exc, "delete", table)
        return list(response.data or [])

    async def rpc(self, function: str, params: dict[str, Any]) -> Any:
        """Call a stored procedure and return its decoded result."""
        try:
            response = await self.client.rpc(function, jsonable(params)).execute()
        except (APIError, httpx.HTTPError) as exc:
            _raise_data_error(exc, "rpc", function)
        return response.data

    async def ping(self) -> None:
        """Cheapest possible round trip; raises ``DataServiceError`` on failure."""
        await self.select("teams", columns="id", limit=1)

    async def aclose(self) -> None:
        await self.client.aclose()


@dataclass
class AuthSession:
    """Tokens issued by the auth service for one signed-in user."""

    user_id: str
    access_token: str
    refresh_token: str | None = None
    expires_in: int | None = None


def _session_from_response(response: Any) -> AuthSession | None:
    session = getattr(response, "session", None)
    user = getattr(response, "user", None)
    if session is None or user is None:
        return None
    return AuthSession(
        user_id=str(user.id),
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_in=session.expires_in,
    )


class SupabaseAuth:
    """Auth operations against the hosted auth service (GoTrue)."""

    def __init__(self, client: AsyncClient, admin_client: AsyncClient):
        self.client = client
        self.admin_client = admin_client

    async def sign_up(self, email: str, password: str, metadata: dict[str, Any]) -> tuple[str, AuthSession | None]:
        """Create an auth user. Returns the new user id and a session, if one was issued."""
        try:
            response = await self.client.auth.sign_up(
                {"email": email, "password": password, "options": {"data": metadata}}
            )
        except AuthApiError as exc:
            if exc.status in (400, 422) and "registered" in exc.message.lower():
                raise DuplicateUserError() from exc
            logger.error("auth_sign_up_failed", status=exc.status, error=exc.message)
            raise DataServiceError(exc.message, service_code=exc.code) from exc
        except (AuthError, httpx.HTTPError) as exc:
            logger.error("auth_unreachable", operation="sign_up", error=str(exc))
            raise DataServiceError("Auth service unavailable") from exc
        if response.user is None:
            raise DataServiceError("Sign-up returned no user")
        return str(response.user.id), _session_from_response(response)

    async def sign_in(self, email: str, password: str) -> AuthSession:
        try:
            response = await self.client.auth.sign_in_with_password({"email": email, "password": password})
        except AuthApiError as exc:
            if exc.status in (400, 401):
                raise InvalidCredentialsError() from exc
            logger.error("auth_sign_in_failed", status=exc.status, error=exc.message)
            raise DataServiceError(exc.message, service_code=exc.code) from exc
        except (AuthError, httpx.HTTPError) as exc:
            logger.error("auth_unreachable", operation="sign_in", error=str(exc))
            raise DataServiceError("Auth service unavailable") from exc
        session = _session_from_response(response)
        if session is None:
            raise InvalidCredentialsError()
        return session

    async def refresh(self, refresh_token: str) -> AuthSession | None:
        """Exchange a refresh token. Returns None when the token is rejected."""
        try:
            response = await self.client.auth.refresh_session(refresh_token)
        except AuthApiError as exc:
            logger.info("auth_refresh_rejected", status=exc.status)
            return None
        except (AuthError, httpx.HTTPError) as exc:
            logger.error("auth_unreachable", operation="refresh", error=str(exc))
            raise DataServiceError("Auth service unavailable") from exc
        return _session_from_response(response)

    async def sign_out(self, access_token: str) -> None:
        """Revoke every refresh token of the session owner."""
        try:
            await self.client.auth.admin.sign_out(access_token)
        except (AuthError, httpx.HTTPError) as exc:
            # The cookies are cleared either way; a stale session just expires.
            logger.warning("auth_sign_out_failed", error=str(exc))

    async def delete_user(self, user_id: str) -> None:
        try:
            await self.admin_client.auth.admin.delete_user(user_id)
        except (AuthError, httpx.HTTPError) as exc:
            logger.error("auth_delete_user_failed", user_id=user_id, error=str(exc))
            raise DataServiceError("Failed to remove auth user") from exc


class SupabaseProvider:
    """Process-wide holder of the Supabase handles."""

    def __init__(self, settings: Settings, client: AsyncClient, admin_client: AsyncClient):
        self.settings = settings
        self.auth = SupabaseAuth(client, admin_client)

    @classmethod
    async def create(cls, settings: Settings) -> "SupabaseProvider":
        options = AsyncClientOptions(
            auto_refresh_token=False,
            persist_session=False,
            postgrest_client_timeout=settings.supabase_timeout_seconds,
        )
        client = await acreate_client(
            settings.supabase_url,
            settings.supabase_publishable_key.get_secret_value(),
            options=options,
        )
        admin_client = await acreate_client(
            settings.supabase_url,
            settings.supabase_service_role_key.get_secret_value(),
            options=options,
        )
        return cls(settings, client, admin_client)

    async def aclose(self) -> None:
        """Close the HTTP sessions of both SDK clients."""
        for client in (self.auth.client, self.auth.admin_client):
            await client.auth.close()

    def _database(self, apikey: str, bearer: str) -> Database:
        headers = {
            **DEFAULT_POSTGREST_CLIENT_HEADERS,
            "apikey": apikey,
            "Authorization": f"Bearer {bearer}",
        }
        client = AsyncPostgrestClient(
            self.settings.rest_url,
            schema="public",
            headers=headers,
            timeout=self.settings.supabase_timeout_seconds,
        )
        return Database(client)

    def database(self, access_token: str) -> Database:
        """Database handle acting as the owner of ``access_token``."""
        return self._database(self.settings.supabase_publishable_key.get_secret_value(), access_token)

    def service_database(self) -> Database:
        """Database handle with the service role (bypasses row-level security)."""
        key = self.settings.supabase_service_role_key.get_secret_value()
        return self._database(key, key)

