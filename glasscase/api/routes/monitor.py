from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.responses import Response

from ...clients.ebay import ListingClient
from ...db.store import WishlistStore
from ...logging import get_logger
from ...models.wishlist import MonitorReport
from ...services.monitor import WishlistItemNotFoundError, WishlistMonitor
from ..deps import get_listing_client, get_store
from ._common import preflight_response, read_json_body

router = APIRouter(tags=["monitor"])

_log = get_logger()


def _wishlist_item_id(payload: object) -> str | None:
    if not isinstance(payload, dict):
        return None
    value = payload.get("wishlistItemId")
    if value is None or value == "":
        return None
    return str(value)


@router.options("/ebay-monitor")
async def ebay_monitor_preflight() -> Response:
    return preflight_response()


@router.post("/ebay-monitor", response_model=MonitorReport)
async def ebay_monitor(
    request: Request,
    client: ListingClient = Depends(get_listing_client),
    store: WishlistStore = Depends(get_store),
) -> MonitorReport | JSONResponse:
    try:
        payload = await read_json_body(request)
    except ValueError:
        payload = {}
    item_id = _wishlist_item_id(payload)

    monitor = WishlistMonitor(client, store)
    try:
        items = await monitor.select_items(item_id)
    except WishlistItemNotFoundError:
        raise HTTPException(status_code=404, detail="Wishlist item not found")
    except Exception as exc:
        _log.error("wishlist_items_fetch_failed", error=str(exc))
        return JSONResponse(
            status_code=500,
            content={"detail": "Failed to fetch wishlist items", "error": str(exc)},
        )

    try:
        return await monitor.run_batch(items)
    except Exception as exc:
        _log.error("wishlist_monitor_failed", error=str(exc))
        return JSONResponse(
            status_code=500,
            content={"detail": "Failed to process eBay monitoring", "error": str(exc)},
        )
