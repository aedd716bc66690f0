from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import pytest

from glasscase.db.store import ITEMS_KEY, InMemoryWishlistStore, RedisWishlistStore, found_key
from glasscase.models.wishlist import FoundListing, WishlistItem, WishlistStatus

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class _FakeRedis:
    """Just enough of redis.asyncio.Redis hash commands for the store."""

    def __init__(self) -> None:
        self.hashes: dict[str, dict[str, str]] = {}

    async def hget(self, key: str, field: str) -> str | None:
        return self.hashes.get(key, {}).get(field)

    async def hset(self, key: str, field: str, value: str) -> int:
        h = self.hashes.setdefault(key, {})
        created = field not in h
        h[field] = value
        return int(created)

    async def hsetnx(self, key: str, field: str, value: str) -> int:
        h = self.hashes.setdefault(key, {})
        if field in h:
            return 0
        h[field] = value
        return 1

    async def hgetall(self, key: str) -> dict[str, str]:
        return dict(self.hashes.get(key, {}))

    async def ping(self) -> bool:
        return True


def _items() -> list[WishlistItem]:
    return [
        WishlistItem(id="b", item_name="Jadite mug", search_term="jadite mug", desired_max_price=Decimal("25")),
        WishlistItem(id="a", item_name="Hen on Nest", search_term="fenton hen on nest"),
        WishlistItem(id="c", item_name="Paused", search_term="pyrex bowl", status=WishlistStatus.PAUSED),
        WishlistItem(id="d", item_name="No term", search_term="   "),
        WishlistItem(id="e", item_name="Null term"),
    ]


def _found(item_id: str, url: str) -> FoundListing:
    return FoundListing(
        wishlist_item_id=item_id,
        title="Listing",
        price=Decimal("12.50"),
        url=url,
        timestamp="2024-06-03T10:00:00.000Z",
        found_at=FIXED_NOW,
    )


async def _redis_store() -> Any:
    store = RedisWishlistStore(_FakeRedis())  # type: ignore[arg-type]
    for it in _items():
        await store.save_item(it)
    return store


async def _memory_store() -> Any:
    return InMemoryWishlistStore(_items())


@pytest.mark.parametrize("factory", [_redis_store, _memory_store])
@pytest.mark.asyncio
async def test_active_items_exclude_paused_and_blank(factory: Any) -> None:
    store = await factory()
    active = await store.list_active_items()
    assert [it.id for it in active] == ["a", "b"]
    assert (await store.get_item("b")).desired_max_price == Decimal("25")
    assert await store.get_item("missing") is None


@pytest.mark.parametrize("factory", [_redis_store, _memory_store])
@pytest.mark.asyncio
async def test_found_listing_unique_per_item_and_url(factory: Any) -> None:
    store = await factory()
    assert await store.add_listing(_found("a", "https://www.ebay.com/itm/1")) is True
    assert await store.add_listing(_found("a", "https://www.ebay.com/itm/1")) is False
    # same url for another wish-list item is a separate finding
    assert await store.add_listing(_found("b", "https://www.ebay.com/itm/1")) is True

    hit = await store.find_listing("a", "https://www.ebay.com/itm/1")
    assert hit is not None and hit.notified is False
    assert await store.find_listing("a", "https://www.ebay.com/itm/2") is None
    assert len(await store.list_listings("a")) == 1


@pytest.mark.parametrize("factory", [_redis_store, _memory_store])
@pytest.mark.asyncio
async def test_touch_item_sets_timestamps(factory: Any) -> None:
    store = await factory()
    await store.touch_item("a", FIXED_NOW)
    item = await store.get_item("a")
    assert item.last_checked_at == FIXED_NOW
    assert item.updated_at == FIXED_NOW
    await store.touch_item("missing", FIXED_NOW)
    assert await store.ping() is True


@pytest.mark.asyncio
async def test_redis_layout() -> None:
    fake = _FakeRedis()
    store = RedisWishlistStore(fake)  # type: ignore[arg-type]
    await store.save_item(_items()[0])
    await store.add_listing(_found("b", "https://www.ebay.com/itm/7"))
    assert "b" in fake.hashes[ITEMS_KEY]
    assert "https://www.ebay.com/itm/7" in fake.hashes[found_key("b")]
