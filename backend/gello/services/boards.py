"""Board service."""

from typing import Any
from uuid import UUID

import structlog

from gello.db.supabase import Database
from gello.exceptions import ResourceNotFoundError
from gello.models.board import Board

logger = structlog.get_logger()


class BoardService:
    """CRUD over ``boards``. Every board belongs to exactly one team."""

    def __init__(self, db: Database):
        self.db = db

    async def get_board(self, board_id: UUID) -> Board:
        row = await self.db.select_one("boards", id=board_id)
        if row is None:
            raise ResourceNotFoundError("Board not found")
        return Board.model_validate(row)

    async def list_boards(self, team_id: UUID) -> list[Board]:
        rows = await self.db.select(
            "boards",
            match={"team_id": team_id},
            order_by=[("created_at", False)],
        )
        return [Board.model_validate(row) for row in rows]

    async def create_board(
        self,
        name: str,
        team_id: UUID,
        created_by: UUID,
        description: str | None = None,
    ) -> Board:
        if await self.db.select_one("teams", columns="id", id=team_id) is None:
            raise ResourceNotFoundError("Team not found")
        row = await self.db.insert(
            "boards",
            {
                "name": name,
                "description": description,
                "team_id": team_id,
                "created_by": created_by,
            },
        )
        board = Board.model_validate(row)
        logger.info("Board created", board_id=str(board.id), team_id=str(team_id))
        return board

    async def update_board(self, board_id: UUID, values: dict[str, Any]) -> Board:
        if not values:
            return await self.get_board(board_id)
        if "team_id" in values and await self.db.select_one("teams", columns="id", id=values["team_id"]) is None:
            raise ResourceNotFoundError("Team not found")
        rows = await self.db.update("boards", values, match={"id": board_id})
        if not rows:
            raise ResourceNotFoundError("Board not found")
        return Board.model_validate(rows[0])

    async def delete_board(self, board_id: UUID) -> None:
        rows = await self.db.delete("boards", match={"id": board_id})
        if not rows:
            raise ResourceNotFoundError("Board not found")
        logger.info("Board deleted", board_id=str(board_id))
