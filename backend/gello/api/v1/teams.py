"""Teams API endpoints."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field, field_validator

from gello.api.v1.auth import CurrentUser, require_role
from gello.db.session import DB
from gello.models.team import Team
from gello.models.user import User
from gello.services.teams import TeamService
from gello.utils.permissions import can_manage_team, can_manage_users

router = APIRouter()
logger = structlog.get_logger()

TeamManager = Annotated[User, Depends(require_role(can_manage_team))]
AdminUser = Annotated[User, Depends(require_role(can_manage_users))]


# Request/Response Models
class TeamCreate(BaseModel):
    """Create or rename a team."""

    name: str = Field(..., max_length=100)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Team name is required")
        return v


class TeamMemberAdd(BaseModel):
    user_id: UUID


@router.get("", response_model=list[Team])
async def list_teams(current_user: CurrentUser, db: DB) -> list[Team]:
    return await TeamService(db).list_teams()


@router.post("", response_model=Team, status_code=status.HTTP_201_CREATED)
async def create_team(payload: TeamCreate, current_user: TeamManager, db: DB) -> Team:
    """Create a team; the creator becomes a member of it."""
    return await TeamService(db).create_team(payload.name, current_user)


@router.get("/{team_id}", response_model=Team)
async def get_team(team_id: UUID, current_user: CurrentUser, db: DB) -> Team:
    return await TeamService(db).get_team(team_id)


@router.put("/{team_id}", response_model=Team)
async def rename_team(team_id: UUID, payload: TeamCreate, current_user: TeamManager, db: DB) -> Team:
    return await TeamService(db).rename_team(team_id, payload.name)


@router.delete("/{team_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_team(team_id: UUID, current_user: AdminUser, db: DB) -> Response:
    await TeamService(db).delete_team(team_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =========================================================================
# Membership
# =========================================================================


@router.get("/{team_id}/members", response_model=list[User])
async def list_members(team_id: UUID, current_user: CurrentUser, db: DB) -> list[User]:
    return await TeamService(db).members(team_id)


@router.post("/{team_id}/members", response_model=User, status_code=status.HTTP_201_CREATED)
async def add_member(team_id: UUID, payload: TeamMemberAdd, current_user: TeamManager, db: DB) -> User:
    return await TeamService(db).add_member(team_id, payload.user_id)


@router.delete("/{team_id}/members/{user_id}", response_model=User)
async def remove_member(team_id: UUID, user_id: UUID, current_user: TeamManager, db: DB) -> User:
    return await TeamService(db).remove_member(team_id, user_id)
