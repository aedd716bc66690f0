from __future__ import annotations

from ..clients.ebay import ListingClient, build_listing_client
from ..db.store import WishlistStore, build_store
from ..models.wishlist import MonitorReport
from ..services.monitor import WishlistMonitor


async def run_monitor(
    wishlist_item_id: str | None = None,
    *,
    client: ListingClient | None = None,
    store: WishlistStore | None = None,
) -> MonitorReport:
    """Scan one wish-list item, or every active one, for new listings.

    Entry point for external schedulers; components default to the
    settings-driven live client and configured store.
    """
    monitor = WishlistMonitor(client or build_listing_client(), store or build_store())
    return await monitor.run(wishlist_item_id)
