"""Authentication endpoints and the current-user dependencies."""

from collections.abc import Callable
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Request, Response, status
from jose import JWTError, jwt
from pydantic import BaseModel, EmailStr, Field

from gello.config import get_settings
from gello.db.session import DB, AuthClient, ServiceDB, get_access_token
from gello.db.supabase import AuthSession
from gello.exceptions import AuthenticationError, ForbiddenError
from gello.models.user import User
from gello.services.auth import AuthService

router = APIRouter()
logger = structlog.get_logger()
settings = get_settings()


class RegisterRequest(BaseModel):
    """Sign-up form."""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    display_name: str = Field(..., min_length=1, max_length=100)
    avatar_url: str | None = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class SessionResponse(BaseModel):
    """The signed-in user. Tokens travel in cookies only."""

    user: User


# =========================================================================
# Token verification
# =========================================================================


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify an access token issued by the auth service and return its claims."""
    try:
        return jwt.decode(
            token,
            settings.supabase_jwt_secret.get_secret_value(),
            algorithms=["HS256"],
            audience=settings.supabase_jwt_audience,
        )
    except JWTError as exc:
        raise AuthenticationError("Invalid or expired token") from exc


async def get_current_user(
    token: Annotated[str, Depends(get_access_token)],
    db: DB,
) -> User:
    """Get the current authenticated user from the access token."""
    claims = decode_access_token(token)
    user_id = claims.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token payload")

    row = await db.select_one("users", id=user_id)
    if row is None:
        raise AuthenticationError("User profile not found")
    return User.model_validate(row)


CurrentUser = Annotated[User, Depends(get_current_user)]


def require_role(predicate: Callable[[Any], bool]) -> Callable[..., Any]:
    """Dependency factory: the current user, if ``predicate(user.role)`` holds."""

    async def dependency(current_user: CurrentUser) -> User:
        if not predicate(current_user.role):
            logger.warning(
                "Permission denied",
                user_id=str(current_user.id),
                role=current_user.role.value if current_user.role else None,
                check=predicate.__name__,
            )
            raise ForbiddenError("Insufficient permissions")
        return current_user

    return dependency


# =========================================================================
# Cookies
# =========================================================================


def set_auth_cookies(response: Response, session: AuthSession) -> None:
    """Store the session tokens in httponly cookies."""
    response.set_cookie(
        settings.access_token_cookie,
        session.access_token,
        max_age=settings.access_token_max_age,
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
        path="/",
    )
    if session.refresh_token:
        response.set_cookie(
            settings.refresh_token_cookie,
            session.refresh_token,
            max_age=settings.refresh_token_max_age,
            httponly=True,
            samesite="lax",
            secure=settings.cookie_secure,
            path="/",
        )


def clear_auth_cookies(response: Response) -> None:
    response.delete_cookie(settings.access_token_cookie, path="/")
    response.delete_cookie(settings.refresh_token_cookie, path="/")


# =========================================================================
# Endpoints
# =========================================================================


@router.post("/register", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    response: Response,
    auth: AuthClient,
    service_db: ServiceDB,
) -> SessionResponse:
    """Create an account. Cookies are set when the auth service issues a session."""
    user, session = await AuthService(auth, service_db).register(
        payload.email,
        payload.password,
        payload.display_name.strip(),
        payload.avatar_url,
    )
    if session is not None:
        set_auth_cookies(response, session)
    return SessionResponse(user=user)


@router.post("/login", response_model=SessionResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    auth: AuthClient,
    service_db: ServiceDB,
) -> SessionResponse:
    user, session = await AuthService(auth, service_db).login(payload.email, payload.password)
    set_auth_cookies(response, session)
    return SessionResponse(user=user)


@router.post("/refresh", response_model=SessionResponse)
async def refresh(
    request: Request,
    response: Response,
    auth: AuthClient,
    service_db: ServiceDB,
) -> SessionResponse:
    """Exchange the refresh cookie for a new session."""
    user, session = await AuthService(auth, service_db).refresh(
        request.cookies.get(settings.refresh_token_cookie)
    )
    set_auth_cookies(response, session)
    return SessionResponse(user=user)


@router.get("/session", response_model=SessionResponse)
async def get_session(current_user: CurrentUser) -> SessionResponse:
    return SessionResponse(user=current_user)


@router.post("/logout")
async def logout(
    response: Response,
    current_user: CurrentUser,
    token: Annotated[str, Depends(get_access_token)],
    auth: AuthClient,
) -> dict[str, bool]:
    await auth.sign_out(token)
    clear_auth_cookies(response)
    logger.info("User logged out", user_id=str(current_user.id))
    return {"success": True}
