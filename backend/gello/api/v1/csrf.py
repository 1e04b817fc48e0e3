"""CSRF token endpoint."""

from fastapi import APIRouter, Request, Response

from gello.config import get_settings
from gello.middleware.csrf import new_csrf_secret, sign_csrf_secret

router = APIRouter()
settings = get_settings()


@router.get("/csrf-token")
async def get_csrf_token(request: Request, response: Response) -> dict[str, str]:
    """Issue a CSRF token, reusing the caller's secret cookie when present."""
    secret = request.cookies.get(settings.csrf_cookie_name)
    if not secret:
        secret = new_csrf_secret()
        response.set_cookie(
            settings.csrf_cookie_name,
            secret,
            httponly=True,
            samesite="lax",
            secure=settings.cookie_secure,
            path="/",
        )
    return {"csrf_token": sign_csrf_secret(secret, settings)}
