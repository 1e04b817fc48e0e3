"""User profile service."""

from typing import Any
from uuid import UUID

import structlog

from gello.db.supabase import Database, SupabaseAuth
from gello.exceptions import ResourceNotFoundError
from gello.models.user import User

logger = structlog.get_logger()


class UserService:
    """Reads and administrative writes on ``users`` profiles."""

    def __init__(self, db: Database, auth: SupabaseAuth | None = None):
        self.db = db
        self.auth = auth

    async def get_user(self, user_id: UUID) -> User:
        row = await self.db.select_one("users", id=user_id)
        if row is None:
            raise ResourceNotFoundError("User not found")
        return User.model_validate(row)

    async def list_users(self) -> list[User]:
        rows = await self.db.select("users", order_by=[("created_at", False)])
        return [User.model_validate(row) for row in rows]

    async def update_user(self, user_id: UUID, values: dict[str, Any]) -> User:
        if not values:
            return await self.get_user(user_id)
        if values.get("team_id") is not None and await self.db.select_one("teams", columns="id", id=values["team_id"]) is None:
            raise ResourceNotFoundError("Team not found")
        rows = await self.db.update("users", values, match={"id": user_id})
        if not rows:
            raise ResourceNotFoundError("User not found")
        logger.info("User updated", user_id=str(user_id), fields=sorted(values))
        return User.model_validate(rows[0])

    async def delete_user(self, user_id: UUID) -> None:
        """Remove the profile and, when an auth client is wired in, the sign-in account."""
        if await self.db.select_one("users", columns="id", id=user_id) is None:
            raise ResourceNotFoundError("User not found")
        if self.auth is not None:
            await self.auth.delete_user(str(user_id))
        # The profile may already be gone through the auth account's cascade.
        await self.db.delete("users", match={"id": user_id})
        logger.info("User deleted", user_id=str(user_id))
