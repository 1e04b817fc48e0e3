"""Double-submit CSRF protection.

``GET /api/csrf-token`` stores a random secret in an httponly cookie and hands
the client a signed copy of it. Every state-changing request must echo that
signed token in the CSRF header; the middleware checks the signature and that
it matches the cookie.
"""

import hmac
import secrets
from typing import Callable

import structlog
from fastapi.responses import ORJSONResponse
from itsdangerous import BadSignature, URLSafeTimedSerializer
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from gello.config import Settings, get_settings

logger = structlog.get_logger()

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "TRACE"})


def _serializer(settings: Settings) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(settings.csrf_secret_key.get_secret_value(), salt="gello-csrf")


def new_csrf_secret() -> str:
    return secrets.token_urlsafe(32)


def sign_csrf_secret(secret: str, settings: Settings | None = None) -> str:
    """Signed token the client sends back in the CSRF header."""
    return _serializer(settings or get_settings()).dumps(secret)


def verify_csrf_token(token: str | None, secret: str | None, settings: Settings | None = None) -> bool:
    if not token or not secret:
        return False
    settings = settings or get_settings()
    try:
        signed_secret = _serializer(settings).loads(token, max_age=settings.refresh_token_max_age)
    except BadSignature:
        return False
    return hmac.compare_digest(str(signed_secret), secret)


class CSRFMiddleware(BaseHTTPMiddleware):
    """Reject unsafe requests without a valid CSRF token."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.method in SAFE_METHODS:
            return await call_next(request)

        settings = get_settings()
        token = request.headers.get(settings.csrf_header_name)
        secret = request.cookies.get(settings.csrf_cookie_name)
        if not verify_csrf_token(token, secret, settings):
            logger.warning("csrf_rejected", has_token=bool(token), has_cookie=bool(secret))
            return ORJSONResponse(
                status_code=403,
                content={"error": "csrf_failed", "message": "Invalid or missing CSRF token"},
            )

        return await call_next(request)
