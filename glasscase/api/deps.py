from __future__ import annotations

from ..clients.ebay import ListingClient, build_listing_client
from ..db.store import WishlistStore, build_store


def get_store() -> WishlistStore:
    return build_store()


def get_listing_client() -> ListingClient:
    # Fresh client per request keeps throttle state request-scoped
    return build_listing_client()
