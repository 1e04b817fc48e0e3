"""Points shop: catalogue, redemption and redemption history."""

from uuid import UUID

import structlog

from gello.db.supabase import Database
from gello.exceptions import DataServiceError, InsufficientPointsError, ResourceNotFoundError, ValidationError
from gello.models.shop import RedeemedItemSummary, Redemption, RedemptionWithItem, ShopItem
from gello.services.points import PointsService

logger = structlog.get_logger()


class ShopService:
    """Spend points on shop items.

    A redemption debits the balance, writes a negative ``redemption`` ledger row
    and records the redemption in one ``redeem_shop_item`` transaction.
    """

    def __init__(self, db: Database):
        self.db = db
        self.points = PointsService(db)

    async def available_items(self) -> list[ShopItem]:
        rows = await self.db.select(
            "shop_items",
            match={"is_active": True},
            order_by=[("point_cost", False)],
        )
        return [ShopItem.model_validate(row) for row in rows]

    async def get_item(self, item_id: UUID) -> ShopItem:
        row = await self.db.select_one("shop_items", id=item_id)
        if row is None:
            raise ResourceNotFoundError("Item not found")
        return ShopItem.model_validate(row)

    async def redeem(self, user_id: UUID, item_id: UUID) -> Redemption:
        item = await self.get_item(item_id)
        if not item.is_active:
            raise ValidationError("Item is not available")

        balance = await self.points.get_user_points(user_id)
        if balance < item.point_cost:
            raise InsufficientPointsError(required=item.point_cost, available=balance)

        # The procedure repeats these checks under lock.
        try:
            row = await self.db.rpc(
                "redeem_shop_item",
                {"p_item_id": item.id, "p_user_id": user_id},
            )
        except DataServiceError as exc:
            if "insufficient_points" in exc.message:
                raise InsufficientPointsError(required=item.point_cost, available=balance) from exc
            if "item_inactive" in exc.message:
                raise ValidationError("Item is not available") from exc
            if "item_not_found" in exc.message:
                raise ResourceNotFoundError("Item not found") from exc
            raise

        redemption = Redemption.model_validate(row)
        logger.info(
            "Shop item redeemed",
            user_id=str(user_id),
            item_id=str(item.id),
            points_spent=item.point_cost,
        )
        return redemption

    async def user_redemptions(self, user_id: UUID) -> list[RedemptionWithItem]:
        """Redemptions for a user, newest first, with item display fields."""
        rows = await self.db.select(
            "redemptions",
            match={"user_id": user_id},
            order_by=[("redeemed_at", True)],
        )
        if not rows:
            return []
        item_ids = {str(row["shop_item_id"]) for row in rows}
        items = await self.db.select(
            "shop_items",
            columns="id, name, category, image_url",
            in_={"id": sorted(item_ids)},
        )
        summaries = {str(item["id"]): RedeemedItemSummary.model_validate(item) for item in items}
        return [
            RedemptionWithItem.model_validate({**row, "shop_item": summaries.get(str(row["shop_item_id"]))})
            for row in rows
        ]
