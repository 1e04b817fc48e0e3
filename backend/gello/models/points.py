"""Points ledger models."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel

from gello.models.base import RowModel


class PointsReason(str, Enum):
    """Why a ledger row was written."""

    TASK_COMPLETE = "task_complete"
    MANUAL_AWARD = "manual_award"
    REDEMPTION = "redemption"


class PointsHistory(RowModel):
    """Append-only ledger row. ``points_earned`` is negative for redemptions."""

    id: UUID
    user_id: UUID
    points_earned: int
    reason: PointsReason
    task_id: UUID | None = None
    awarded_by: UUID | None = None
    notes: str | None = None
    created_at: datetime | None = None


class LeaderboardEntry(BaseModel):
    user_id: UUID
    display_name: str
    email: str
    avatar_url: str | None = None
    total_points: int
    rank: int
