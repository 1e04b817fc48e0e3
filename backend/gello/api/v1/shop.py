"""Points shop endpoints (served at ``/points-shop``)."""

from uuid import UUID

import structlog
from fastapi import APIRouter, status
from pydantic import BaseModel

from gello.api.v1.auth import CurrentUser
from gello.db.session import DB
from gello.models.points import PointsHistory
from gello.models.shop import Redemption, RedemptionWithItem, ShopItem
from gello.services.points import PointsService
from gello.services.shop import ShopService

router = APIRouter()
logger = structlog.get_logger()


class ShopOverview(BaseModel):
    """Everything the shop page shows for the caller."""

    items: list[ShopItem]
    balance: int
    points_history: list[PointsHistory]
    redemptions: list[RedemptionWithItem]


@router.get("", response_model=ShopOverview)
async def shop_overview(current_user: CurrentUser, db: DB) -> ShopOverview:
    shop = ShopService(db)
    points = PointsService(db)
    return ShopOverview(
        items=await shop.available_items(),
        balance=await points.get_user_points(current_user.id),
        points_history=await points.get_history(current_user.id),
        redemptions=await shop.user_redemptions(current_user.id),
    )


@router.post("/redeem/{item_id}", response_model=Redemption, status_code=status.HTTP_201_CREATED)
async def redeem_item(item_id: UUID, current_user: CurrentUser, db: DB) -> Redemption:
    return await ShopService(db).redeem(current_user.id, item_id)
