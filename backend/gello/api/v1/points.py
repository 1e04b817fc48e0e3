"""Points and leaderboard API endpoints."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from gello.api.v1.auth import CurrentUser, require_role
from gello.db.session import DB
from gello.exceptions import ForbiddenError
from gello.models.points import LeaderboardEntry, PointsHistory
from gello.models.user import User
from gello.services.points import PointsService
from gello.utils.permissions import can_manage_users, is_admin, is_manager

router = APIRouter()
logger = structlog.get_logger()

AdminUser = Annotated[User, Depends(require_role(can_manage_users))]


# Request/Response Models
class ManualAward(BaseModel):
    """Points granted by an admin outside the task flow."""

    points_earned: int = Field(..., strict=True)
    notes: str | None = Field(None, max_length=500)


class UserPointsResponse(BaseModel):
    user_id: UUID
    total_points: int


@router.get("/leaderboard", response_model=list[LeaderboardEntry])
async def get_leaderboard(
    current_user: CurrentUser,
    db: DB,
    limit: int | None = Query(None, description="Number of entries (clamped to 1..1000)"),
) -> list[LeaderboardEntry]:
    return await PointsService(db).get_leaderboard(limit)


@router.get("/users/{user_id}/points", response_model=UserPointsResponse)
async def get_user_points(user_id: UUID, current_user: CurrentUser, db: DB) -> UserPointsResponse:
    total = await PointsService(db).get_user_points(user_id)
    return UserPointsResponse(user_id=user_id, total_points=total)


@router.get("/users/{user_id}/history", response_model=list[PointsHistory])
async def get_points_history(user_id: UUID, current_user: CurrentUser, db: DB) -> list[PointsHistory]:
    """Ledger of a user, newest first. Visible to the user and to managers."""
    if user_id != current_user.id and not (is_admin(current_user.role) or is_manager(current_user.role)):
        raise ForbiddenError("You can only view your own points history")
    return await PointsService(db).get_history(user_id)


@router.post(
    "/users/{user_id}/points",
    response_model=PointsHistory,
    status_code=status.HTTP_201_CREATED,
)
async def award_points(user_id: UUID, payload: ManualAward, current_user: AdminUser, db: DB) -> PointsHistory:
    return await PointsService(db).award_manual(
        user_id,
        payload.points_earned,
        awarded_by=current_user.id,
        notes=payload.notes,
    )
