"""List service."""

from typing import Any
from uuid import UUID

import structlog

from gello.db.supabase import Database
from gello.exceptions import DataServiceError, ResourceNotFoundError, ValidationError
from gello.models.board import TaskList

logger = structlog.get_logger()


class ListService:
    """CRUD over ``lists`` and atomic reordering within a board."""

    def __init__(self, db: Database):
        self.db = db

    async def get_list(self, list_id: UUID) -> TaskList:
        row = await self.db.select_one("lists", id=list_id)
        if row is None:
            raise ResourceNotFoundError("List not found")
        return TaskList.model_validate(row)

    async def lists_for_board(self, board_id: UUID) -> list[TaskList]:
        rows = await self.db.select(
            "lists",
            match={"board_id": board_id},
            order_by=[("position", False)],
        )
        return [TaskList.model_validate(row) for row in rows]

    async def create_list(self, board_id: UUID, name: str, position: int | None = None) -> TaskList:
        if await self.db.select_one("boards", columns="id", id=board_id) is None:
            raise ResourceNotFoundError("Board not found")
        row = await self.db.insert(
            "lists",
            {"board_id": board_id, "name": name, "position": position or 0},
        )
        task_list = TaskList.model_validate(row)
        logger.info("List created", list_id=str(task_list.id), board_id=str(board_id))
        return task_list

    async def update_list(self, list_id: UUID, values: dict[str, Any]) -> TaskList:
        if not values:
            return await self.get_list(list_id)
        rows = await self.db.update("lists", values, match={"id": list_id})
        if not rows:
            raise ResourceNotFoundError("List not found")
        return TaskList.model_validate(rows[0])

    async def delete_list(self, list_id: UUID) -> None:
        rows = await self.db.delete("lists", match={"id": list_id})
        if not rows:
            raise ResourceNotFoundError("List not found")
        logger.info("List deleted", list_id=str(list_id))

    async def reorder_lists(
        self,
        board_id: UUID,
        positions: list[tuple[UUID, int]],
        user_id: UUID | None = None,
    ) -> int:
        """Set the positions of several lists of one board in a single call.

        Every id must be unique and belong to ``board_id``. Returns the number
        of lists updated.
        """
        if not positions:
            raise ValidationError("At least one list position is required")
        ids = [list_id for list_id, _ in positions]
        if len(set(ids)) != len(ids):
            raise ValidationError("Duplicate list IDs found in input")

        existing = await self.db.select(
            "lists",
            columns="id",
            match={"board_id": board_id},
            in_={"id": ids},
        )
        existing_ids = {str(row["id"]) for row in existing}
        missing = [str(list_id) for list_id in ids if str(list_id) not in existing_ids]
        if missing:
            raise ValidationError(
                f"List IDs do not belong to board {board_id}: {', '.join(missing)}",
                details=missing,
            )

        updated = await self.db.rpc(
            "reorder_lists",
            {
                "p_board_id": board_id,
                "p_list_positions": [{"id": list_id, "position": position} for list_id, position in positions],
                "p_user_id": user_id,
            },
        )
        if updated != len(positions):
            logger.error(
                "List reorder count mismatch",
                board_id=str(board_id),
                expected=len(positions),
                updated=updated,
            )
            raise DataServiceError(f"Expected to update {len(positions)} lists, updated {updated}")
        logger.info("Lists reordered", board_id=str(board_id), count=updated)
        return updated
