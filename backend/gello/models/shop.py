"""Points shop models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from gello.models.base import RowModel


class ShopItem(RowModel):
    id: UUID
    name: str
    description: str | None = None
    point_cost: int
    category: str = "item"
    image_url: str | None = None
    is_active: bool = True
    created_at: datetime | None = None


class Redemption(RowModel):
    id: UUID
    user_id: UUID
    shop_item_id: UUID
    points_spent: int
    redeemed_at: datetime | None = None


class RedeemedItemSummary(BaseModel):
    name: str
    category: str
    image_url: str | None = None


class RedemptionWithItem(Redemption):
    """Redemption joined with the display fields of its shop item."""

    shop_item: RedeemedItemSummary | None = None
