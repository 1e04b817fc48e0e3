"""Team model."""

from datetime import datetime
from uuid import UUID

from gello.models.base import RowModel


class Team(RowModel):
    id: UUID
    name: str
    created_at: datetime | None = None
