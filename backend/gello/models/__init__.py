"""Row models for the tables owned by the hosted data service."""

from gello.models.board import Board, TaskList
from gello.models.points import LeaderboardEntry, PointsHistory, PointsReason
from gello.models.shop import Redemption, RedemptionWithItem, ShopItem
from gello.models.task import Task
from gello.models.team import Team
from gello.models.user import Role, User

__all__ = [
    "Board",
    "LeaderboardEntry",
    "PointsHistory",
    "PointsReason",
    "Redemption",
    "RedemptionWithItem",
    "Role",
    "ShopItem",
    "Task",
    "TaskList",
    "Team",
    "User",
]
