"""Lists API endpoints."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from gello.api.v1.auth import CurrentUser, require_role
from gello.db.session import DB
from gello.models.board import TaskList
from gello.models.user import User
from gello.services.lists import ListService
from gello.utils.permissions import can_manage_list

router = APIRouter()
logger = structlog.get_logger()

ListManager = Annotated[User, Depends(require_role(can_manage_list))]


# Request/Response Models
class ListCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    position: int | None = Field(None, ge=0)


class ListUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    position: int | None = Field(None, ge=0)


class ListPosition(BaseModel):
    id: UUID
    position: int = Field(..., ge=0)


class ListReorder(BaseModel):
    """New positions for lists of the same board."""

    board_id: UUID
    list_positions: list[ListPosition]


@router.get("/boards/{board_id}/lists", response_model=list[TaskList])
async def list_board_lists(board_id: UUID, current_user: CurrentUser, db: DB) -> list[TaskList]:
    return await ListService(db).lists_for_board(board_id)


@router.post("/boards/{board_id}/lists", response_model=TaskList, status_code=status.HTTP_201_CREATED)
async def create_list(board_id: UUID, payload: ListCreate, current_user: ListManager, db: DB) -> TaskList:
    return await ListService(db).create_list(board_id, payload.name, payload.position)


@router.get("/{list_id}", response_model=TaskList)
async def get_list(list_id: UUID, current_user: CurrentUser, db: DB) -> TaskList:
    return await ListService(db).get_list(list_id)


@router.put("/{list_id}", response_model=TaskList)
async def update_list(list_id: UUID, payload: ListUpdate, current_user: ListManager, db: DB) -> TaskList:
    values = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    return await ListService(db).update_list(list_id, values)


@router.patch("/{list_id}/reorder")
async def reorder_lists(
    list_id: UUID,
    payload: ListReorder,
    current_user: ListManager,
    db: DB,
) -> dict[str, int]:
    """Reorder the lists of ``payload.board_id`` in one atomic call.

    ``list_id`` names the list that was dragged; the body carries every new position.
    """
    positions = [(item.id, item.position) for item in payload.list_positions]
    updated = await ListService(db).reorder_lists(payload.board_id, positions, current_user.id)
    return {"updated": updated}


@router.delete("/{list_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_list(list_id: UUID, current_user: ListManager, db: DB) -> Response:
    await ListService(db).delete_list(list_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
