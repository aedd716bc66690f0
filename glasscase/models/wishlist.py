from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import Field

from .listing import CamelModel, ListingRecord, Money


class WishlistStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"


class WishlistItem(CamelModel):
    id: str
    item_name: str = ""
    search_term: str | None = None
    desired_max_price: Money | None = None
    status: WishlistStatus = WishlistStatus.ACTIVE
    last_checked_at: datetime | None = None
    updated_at: datetime | None = None

    def has_search_term(self) -> bool:
        return bool(self.search_term and self.search_term.strip())


class FoundListing(CamelModel):
    wishlist_item_id: str
    platform: str = "ebay"
    title: str
    price: Money = Field(..., ge=0)
    url: str
    image_url: str | None = None
    condition: str | None = None
    timestamp: str
    found_at: datetime
    notified: bool = False

    @classmethod
    def from_record(
        cls, wishlist_item_id: str, record: ListingRecord, found_at: datetime
    ) -> FoundListing:
        return cls(
            wishlist_item_id=wishlist_item_id,
            title=record.title,
            price=record.price,
            url=record.url,
            image_url=record.image_url,
            condition=record.condition,
            timestamp=record.timestamp,
            found_at=found_at,
        )


class MonitorItemResult(CamelModel):
    item_id: str
    item_name: str
    new_listings_found: int


class MonitorReport(CamelModel):
    success: bool = True
    items_processed: int
    total_new_listings: int
    results: list[MonitorItemResult]
    processed_at: datetime
