"""Services package."""

from gello.services.auth import AuthService
from gello.services.boards import BoardService
from gello.services.lists import ListService
from gello.services.points import PointsService
from gello.services.shop import ShopService
from gello.services.tasks import TaskService
from gello.services.teams import TeamService
from gello.services.users import UserService

__all__ = [
    "AuthService",
    "BoardService",
    "ListService",
    "PointsService",
    "ShopService",
    "TaskService",
    "TeamService",
    "UserService",
]
