"""Team service."""

from uuid import UUID

import structlog

from gello.db.supabase import Database
from gello.exceptions import ResourceNotFoundError
from gello.models.team import Team
from gello.models.user import User

logger = structlog.get_logger()


class TeamService:
    """Teams and their membership (``users.team_id``)."""

    def __init__(self, db: Database):
        self.db = db

    async def get_team(self, team_id: UUID) -> Team:
        row = await self.db.select_one("teams", id=team_id)
        if row is None:
            raise ResourceNotFoundError("Team not found")
        return Team.model_validate(row)

    async def list_teams(self) -> list[Team]:
        rows = await self.db.select("teams", order_by=[("name", False)])
        return [Team.model_validate(row) for row in rows]

    async def create_team(self, name: str, creator: User) -> Team:
        """Create a team and move its creator into it."""
        row = await self.db.insert("teams", {"name": name})
        team = Team.model_validate(row)
        await self.db.update("users", {"team_id": team.id}, match={"id": creator.id})
        logger.info("Team created", team_id=str(team.id), created_by=str(creator.id))
        return team

    async def rename_team(self, team_id: UUID, name: str) -> Team:
        rows = await self.db.update("teams", {"name": name}, match={"id": team_id})
        if not rows:
            raise ResourceNotFoundError("Team not found")
        return Team.model_validate(rows[0])

    async def delete_team(self, team_id: UUID) -> None:
        rows = await self.db.delete("teams", match={"id": team_id})
        if not rows:
            raise ResourceNotFoundError("Team not found")
        logger.info("Team deleted", team_id=str(team_id))

    async def members(self, team_id: UUID) -> list[User]:
        await self.get_team(team_id)
        rows = await self.db.select(
            "users",
            match={"team_id": team_id},
            order_by=[("display_name", False)],
        )
        return [User.model_validate(row) for row in rows]

    async def add_member(self, team_id: UUID, user_id: UUID) -> User:
        await self.get_team(team_id)
        rows = await self.db.update("users", {"team_id": team_id}, match={"id": user_id})
        if not rows:
            raise ResourceNotFoundError("User not found")
        logger.info("Team member added", team_id=str(team_id), user_id=str(user_id))
        return User.model_validate(rows[0])

    async def remove_member(self, team_id: UUID, user_id: UUID) -> User:
        rows = await self.db.update("users", {"team_id": None}, match={"id": user_id, "team_id": team_id})
        if not rows:
            raise ResourceNotFoundError("User is not a member of this team")
        logger.info("Team member removed", team_id=str(team_id), user_id=str(user_id))
        return User.model_validate(rows[0])
