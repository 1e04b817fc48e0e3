"""User administration endpoints."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from gello.api.v1.auth import CurrentUser, require_role
from gello.db.session import DB, AuthClient
from gello.exceptions import ValidationError
from gello.models.user import Role, User
from gello.services.users import UserService
from gello.utils.permissions import can_manage_users, can_view_all_users

router = APIRouter()
logger = structlog.get_logger()

AdminUser = Annotated[User, Depends(require_role(can_manage_users))]
UserViewer = Annotated[User, Depends(require_role(can_view_all_users))]


class UserUpdate(BaseModel):
    """Admin edit of a profile. ``team_id: null`` removes the user from their team."""

    display_name: str | None = Field(None, min_length=1, max_length=100)
    role: Role | None = None
    team_id: UUID | None = None
    avatar_url: str | None = None


@router.get("", response_model=list[User])
async def list_users(current_user: UserViewer, db: DB) -> list[User]:
    return await UserService(db).list_users()


@router.get("/{user_id}", response_model=User)
async def get_user(user_id: UUID, current_user: CurrentUser, db: DB) -> User:
    return await UserService(db).get_user(user_id)


@router.put("/{user_id}", response_model=User)
async def update_user(user_id: UUID, payload: UserUpdate, current_user: AdminUser, db: DB) -> User:
    values = payload.model_dump(exclude_unset=True)
    if "role" in values and values["role"] is None:
        raise ValidationError("Role cannot be null")
    if "display_name" in values and values["display_name"] is None:
        values.pop("display_name")
    if user_id == current_user.id and values.get("role") not in (None, Role.ADMIN):
        raise ValidationError("Admins cannot demote themselves")
    return await UserService(db).update_user(user_id, values)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: UUID, current_user: AdminUser, db: DB, auth: AuthClient) -> Response:
    if user_id == current_user.id:
        raise ValidationError("Admins cannot delete their own account")
    await UserService(db, auth).delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
