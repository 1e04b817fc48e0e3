"""Task model."""

from datetime import datetime
from uuid import UUID

from gello.models.base import RowModel


class Task(RowModel):
    """Card on a list.

    ``completed_at`` is the only state flag: null means open, a timestamp means
    complete. The transition is one-way.
    """

    id: UUID
    list_id: UUID
    title: str
    description: str | None = None
    story_points: int = 1
    assigned_to: UUID | None = None
    position: int = 0
    due_date: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime | None = None

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None
