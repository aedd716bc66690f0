from __future__ import annotations

from datetime import datetime
from functools import lru_cache
from typing import Protocol

from redis.asyncio import Redis

from ..config import Settings, settings
from ..models.wishlist import FoundListing, WishlistItem, WishlistStatus


class WishlistStore(Protocol):
    async def get_item(self, item_id: str) -> WishlistItem | None: ...

    async def list_active_items(self) -> list[WishlistItem]: ...

    async def save_item(self, item: WishlistItem) -> None: ...

    async def touch_item(self, item_id: str, at: datetime) -> None: ...

    async def find_listing(self, wishlist_item_id: str, url: str) -> FoundListing | None: ...

    async def add_listing(self, listing: FoundListing) -> bool: ...

    async def list_listings(self, wishlist_item_id: str) -> list[FoundListing]: ...

    async def ping(self) -> bool: ...


@lru_cache(maxsize=1)
def get_redis() -> Redis[str]:
    return Redis.from_url(settings.REDIS_URL, decode_responses=True)


def ns(namespace: str, key: str) -> str:
    return f"{namespace}:{key}"


ITEMS_KEY = ns("wl", "items")


def found_key(wishlist_item_id: str) -> str:
    return ns("wl", f"found:{wishlist_item_id}")


def _is_monitored(item: WishlistItem) -> bool:
    return item.status == WishlistStatus.ACTIVE and item.has_search_term()


class RedisWishlistStore:
    """Wish-list entities in Redis.

    Keys:
      - wl:items            HASH item_id -> WishlistItem JSON
      - wl:found:{item_id}  HASH listing url -> FoundListing JSON
    """

    def __init__(self, redis: Redis[str] | None = None) -> None:
        self._r = redis if redis is not None else get_redis()

    async def get_item(self, item_id: str) -> WishlistItem | None:
        raw = await self._r.hget(ITEMS_KEY, item_id)
        if raw is None:
            return None
        return WishlistItem.model_validate_json(raw)

    async def list_active_items(self) -> list[WishlistItem]:
        raw = await self._r.hgetall(ITEMS_KEY)
        items = [WishlistItem.model_validate_json(v) for v in raw.values()]
        items.sort(key=lambda it: it.id)
        return [it for it in items if _is_monitored(it)]

    async def save_item(self, item: WishlistItem) -> None:
        await self._r.hset(ITEMS_KEY, item.id, item.model_dump_json())

    async def touch_item(self, item_id: str, at: datetime) -> None:
        item = await self.get_item(item_id)
        if item is None:
            return
        await self.save_item(item.model_copy(update={"last_checked_at": at, "updated_at": at}))

    async def find_listing(self, wishlist_item_id: str, url: str) -> FoundListing | None:
        raw = await self._r.hget(found_key(wishlist_item_id), url)
        if raw is None:
            return None
        return FoundListing.model_validate_json(raw)

    async def add_listing(self, listing: FoundListing) -> bool:
        # HSETNX keeps (wishlist_item_id, url) unique even under concurrent runs
        created = await self._r.hsetnx(
            found_key(listing.wishlist_item_id), listing.url, listing.model_dump_json()
        )
        return bool(created)

    async def list_listings(self, wishlist_item_id: str) -> list[FoundListing]:
        raw = await self._r.hgetall(found_key(wishlist_item_id))
        listings = [FoundListing.model_validate_json(v) for v in raw.values()]
        listings.sort(key=lambda f: f.found_at)
        return listings

    async def ping(self) -> bool:
        try:
            res = await self._r.ping()
            return bool(res)
        except Exception:
            return False


class InMemoryWishlistStore:
    """Process-local store for tests and single-process development runs."""

    def __init__(self, items: list[WishlistItem] | None = None) -> None:
        self._items: dict[str, WishlistItem] = {it.id: it for it in items or []}
        self._found: dict[tuple[str, str], FoundListing] = {}

    async def get_item(self, item_id: str) -> WishlistItem | None:
        return self._items.get(item_id)

    async def list_active_items(self) -> list[WishlistItem]:
        return [it for _, it in sorted(self._items.items()) if _is_monitored(it)]

    async def save_item(self, item: WishlistItem) -> None:
        self._items[item.id] = item

    async def touch_item(self, item_id: str, at: datetime) -> None:
        item = self._items.get(item_id)
        if item is not None:
            self._items[item_id] = item.model_copy(update={"last_checked_at": at, "updated_at": at})

    async def find_listing(self, wishlist_item_id: str, url: str) -> FoundListing | None:
        return self._found.get((wishlist_item_id, url))

    async def add_listing(self, listing: FoundListing) -> bool:
        key = (listing.wishlist_item_id, listing.url)
        if key in self._found:
            return False
        self._found[key] = listing
        return True

    async def list_listings(self, wishlist_item_id: str) -> list[FoundListing]:
        return [f for (iid, _), f in self._found.items() if iid == wishlist_item_id]

    async def ping(self) -> bool:
        return True


_memory_store: InMemoryWishlistStore | None = None


def build_store(cfg: Settings | None = None) -> WishlistStore:
    global _memory_store
    cfg = cfg or settings
    if cfg.STORE_BACKEND == "memory":
        if _memory_store is None:
            _memory_store = InMemoryWishlistStore()
        return _memory_store
    return RedisWishlistStore()
