"""Account registration and session management over the hosted auth service."""

import structlog

from gello.db.supabase import AuthSession, Database, SupabaseAuth
from gello.exceptions import AuthenticationError, DataServiceError, DuplicateUserError
from gello.models.user import Role, User

logger = structlog.get_logger()


class AuthService:
    """Registration, password login and session refresh.

    Profiles live in ``public.users`` keyed by the auth user id and are written
    with the service role, because a freshly signed-up user may not have a
    session yet (e-mail confirmation).
    """

    def __init__(self, auth: SupabaseAuth, service_db: Database):
        self.auth = auth
        self.service_db = service_db

    async def _profile(self, user_id: str) -> User:
        row = await self.service_db.select_one("users", id=user_id)
        if row is None:
            logger.warning("Auth user without profile", user_id=user_id)
            raise AuthenticationError("User profile not found")
        return User.model_validate(row)

    async def register(
        self,
        email: str,
        password: str,
        display_name: str,
        avatar_url: str | None = None,
    ) -> tuple[User, AuthSession | None]:
        """Create the auth user and its profile row.

        New accounts are always members. If the profile insert fails the auth
        user is deleted again so no orphan is left behind.
        """
        email = email.lower()
        if await self.service_db.select_one("users", columns="id", email=email) is not None:
            raise DuplicateUserError()

        user_id, session = await self.auth.sign_up(
            email, password, {"display_name": display_name, "role": Role.MEMBER.value}
        )

        try:
            row = await self.service_db.insert(
                "users",
                {
                    "id": user_id,
                    "email": email,
                    "display_name": display_name,
                    "role": Role.MEMBER,
                    "avatar_url": avatar_url,
                },
            )
        except DataServiceError:
            logger.error("Profile insert failed, removing auth user", user_id=user_id)
            try:
                await self.auth.delete_user(user_id)
            except DataServiceError:
                logger.exception("Failed to clean up auth user", user_id=user_id)
            raise

        user = User.model_validate(row)
        logger.info("User registered", user_id=user_id)
        return user, session

    async def login(self, email: str, password: str) -> tuple[User, AuthSession]:
        session = await self.auth.sign_in(email.lower(), password)
        user = await self._profile(session.user_id)
        logger.info("User logged in", user_id=session.user_id)
        return user, session

    async def refresh(self, refresh_token: str | None) -> tuple[User, AuthSession]:
        if not refresh_token:
            raise AuthenticationError("No refresh token")
        session = await self.auth.refresh(refresh_token)
        if session is None:
            raise AuthenticationError("Session expired")
        return await self._profile(session.user_id), session
