"""Points ledger, balances and leaderboard."""

from collections.abc import Sequence
from typing import Any
from uuid import UUID

import structlog

from gello.config import get_settings
from gello.db.supabase import Database
from gello.exceptions import ResourceNotFoundError, ValidationError
from gello.models.points import LeaderboardEntry, PointsHistory, PointsReason
from gello.utils.points import validate_manual_award

logger = structlog.get_logger()

LEADERBOARD_COLUMNS = "id, display_name, email, avatar_url, total_points, created_at"


def clamp_leaderboard_limit(limit: int | None) -> int:
    """Default a missing limit and clamp the rest to the allowed window."""
    settings = get_settings()
    if limit is None:
        return settings.leaderboard_default_limit
    return max(1, min(settings.leaderboard_max_limit, limit))


def rank_leaderboard(rows: Sequence[dict[str, Any]]) -> list[LeaderboardEntry]:
    """Order user rows by points and assign positional ranks.

    Highest ``total_points`` first; ties fall back to creation time, then id, so
    the order is total. Ranks are 1-based positions with no shared ranks and no
    gaps.
    """
    ordered = sorted(
        rows,
        key=lambda row: (
            -(row.get("total_points") or 0),
            str(row.get("created_at") or ""),
            str(row["id"]),
        ),
    )
    return [
        LeaderboardEntry(
            user_id=row["id"],
            display_name=row["display_name"],
            email=row["email"],
            avatar_url=row.get("avatar_url"),
            total_points=row.get("total_points") or 0,
            rank=position,
        )
        for position, row in enumerate(ordered, start=1)
    ]


class PointsService:
    """Reads and writes against ``points_history`` and user balances."""

    def __init__(self, db: Database):
        self.db = db

    async def get_leaderboard(self, limit: int | None = None) -> list[LeaderboardEntry]:
        limit = clamp_leaderboard_limit(limit)
        rows = await self.db.select(
            "users",
            columns=LEADERBOARD_COLUMNS,
            order_by=[("total_points", True), ("created_at", False), ("id", False)],
            limit=limit,
        )
        # The store already orders; ranking again keeps ranks positional even if it didn't.
        return rank_leaderboard(rows)

    async def get_user_points(self, user_id: UUID) -> int:
        row = await self.db.select_one("users", columns="id, total_points", id=user_id)
        if row is None:
            raise ResourceNotFoundError("User not found")
        return row.get("total_points") or 0

    async def get_history(self, user_id: UUID) -> list[PointsHistory]:
        """Ledger entries for a user, newest first."""
        rows = await self.db.select(
            "points_history",
            match={"user_id": user_id},
            order_by=[("created_at", True)],
        )
        return [PointsHistory.model_validate(row) for row in rows]

    async def record(
        self,
        user_id: UUID,
        points_earned: int,
        reason: PointsReason,
        *,
        task_id: UUID | None = None,
        awarded_by: UUID | None = None,
        notes: str | None = None,
    ) -> PointsHistory:
        """Append a ledger row and apply it to the user's balance atomically."""
        row = await self.db.rpc(
            "create_points_history_atomic",
            {
                "p_user_id": user_id,
                "p_points_earned": points_earned,
                "p_reason": reason,
                "p_task_id": task_id,
                "p_awarded_by": awarded_by,
                "p_notes": notes,
            },
        )
        return PointsHistory.model_validate(row)

    async def award_manual(
        self,
        user_id: UUID,
        points_earned: Any,
        awarded_by: UUID,
        notes: str | None = None,
    ) -> PointsHistory:
        if not validate_manual_award(points_earned):
            raise ValidationError("Points must be a positive number")
        if await self.db.select_one("users", columns="id", id=user_id) is None:
            raise ResourceNotFoundError("User not found")

        entry = await self.record(
            user_id,
            int(points_earned),
            PointsReason.MANUAL_AWARD,
            awarded_by=awarded_by,
            notes=notes,
        )
        logger.info(
            "Manual points awarded",
            user_id=str(user_id),
            points=entry.points_earned,
            awarded_by=str(awarded_by),
        )
        return entry
