"""Boards API endpoints."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field

from gello.api.v1.auth import CurrentUser, require_role
from gello.db.session import DB
from gello.models.board import Board
from gello.models.user import User
from gello.services.boards import BoardService
from gello.utils.permissions import can_manage_board

router = APIRouter()
logger = structlog.get_logger()

BoardManager = Annotated[User, Depends(require_role(can_manage_board))]


# Request/Response Models
class BoardCreate(BaseModel):
    """Create a new board."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    team_id: UUID


class BoardUpdate(BaseModel):
    """Update a board."""

    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    team_id: UUID | None = None


@router.get("", response_model=list[Board])
async def list_boards(
    current_user: CurrentUser,
    db: DB,
    team_id: UUID = Query(...),
) -> list[Board]:
    """List a team's boards."""
    return await BoardService(db).list_boards(team_id)


@router.post("", response_model=Board, status_code=status.HTTP_201_CREATED)
async def create_board(payload: BoardCreate, current_user: BoardManager, db: DB) -> Board:
    return await BoardService(db).create_board(
        name=payload.name,
        team_id=payload.team_id,
        created_by=current_user.id,
        description=payload.description,
    )


@router.get("/{board_id}", response_model=Board)
async def get_board(board_id: UUID, current_user: CurrentUser, db: DB) -> Board:
    return await BoardService(db).get_board(board_id)


@router.put("/{board_id}", response_model=Board)
async def update_board(board_id: UUID, payload: BoardUpdate, current_user: BoardManager, db: DB) -> Board:
    values = payload.model_dump(exclude_unset=True)
    if values.get("team_id") is None:
        values.pop("team_id", None)
    return await BoardService(db).update_board(board_id, values)


@router.delete("/{board_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_board(board_id: UUID, current_user: BoardManager, db: DB) -> Response:
    await BoardService(db).delete_board(board_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
