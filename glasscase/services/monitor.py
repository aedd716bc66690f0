from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from ..clients.ebay import ListingClient
from ..db.store import WishlistStore
from ..logging import get_logger
from ..models.wishlist import FoundListing, MonitorItemResult, MonitorReport, WishlistItem

_log = get_logger()


class WishlistItemNotFoundError(LookupError):
    def __init__(self, item_id: str) -> None:
        super().__init__(f"wishlist item {item_id!r} not found")
        self.item_id = item_id


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WishlistMonitor:
    """Check saved wish-list searches for new active listings.

    Found listings are deduplicated on (wishlist item id, listing url) before
    insert and are never removed here.
    """

    def __init__(
        self,
        client: ListingClient,
        store: WishlistStore,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.client = client
        self.store = store
        self._clock = clock

    async def process_one(self, item: WishlistItem) -> int:
        if not item.has_search_term():
            _log.info("wishlist_item_skipped", item_id=item.id, reason="no_search_term")
            return 0

        term = (item.search_term or "").strip()
        new_count = 0
        try:
            listings = await self.client.search_active(term, item.desired_max_price)
            for listing in listings:
                try:
                    if await self.store.find_listing(item.id, listing.url) is not None:
                        continue
                    found = FoundListing.from_record(item.id, listing, self._clock())
                    if await self.store.add_listing(found):
                        new_count += 1
                        _log.info(
                            "found_listing_recorded",
                            item_id=item.id,
                            title=listing.title,
                            price=str(listing.price),
                        )
                except Exception as exc:
                    _log.error("found_listing_insert_failed", item_id=item.id, url=listing.url, error=str(exc))
        finally:
            await self.store.touch_item(item.id, self._clock())

        _log.info("wishlist_item_processed", item_id=item.id, term=term, new_listings=new_count)
        return new_count

    async def run_batch(self, items: Iterable[WishlistItem]) -> MonitorReport:
        results: list[MonitorItemResult] = []
        for item in items:
            try:
                count = await self.process_one(item)
            except Exception as exc:
                _log.error("wishlist_item_failed", item_id=item.id, error=str(exc))
                count = 0
            results.append(
                MonitorItemResult(item_id=item.id, item_name=item.item_name, new_listings_found=count)
            )

        report = MonitorReport(
            success=True,
            items_processed=len(results),
            total_new_listings=sum(r.new_listings_found for r in results),
            results=results,
            processed_at=self._clock(),
        )
        _log.info(
            "wishlist_monitor_completed",
            items_processed=report.items_processed,
            total_new_listings=report.total_new_listings,
        )
        return report

    async def select_items(self, wishlist_item_id: str | None = None) -> list[WishlistItem]:
        if wishlist_item_id:
            item = await self.store.get_item(wishlist_item_id)
            if item is None:
                raise WishlistItemNotFoundError(wishlist_item_id)
            return [item]
        return await self.store.list_active_items()

    async def run(self, wishlist_item_id: str | None = None) -> MonitorReport:
        items = await self.select_items(wishlist_item_id)
        _log.info("wishlist_monitor_started", items=len(items), single=bool(wishlist_item_id))
        return await self.run_batch(items)
