"""Board and list models."""

from datetime import datetime
from uuid import UUID

from gello.models.base import RowModel


class Board(RowModel):
    """Kanban board scoped to exactly one team."""

    id: UUID
    name: str
    description: str | None = None
    team_id: UUID
    created_by: UUID | None = None
    created_at: datetime | None = None


class TaskList(RowModel):
    """Column on a board; ``position`` orders lists within the board."""

    id: UUID
    board_id: UUID
    name: str
    position: int = 0
    created_at: datetime | None = None
