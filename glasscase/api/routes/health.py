from __future__ import annotations

from fastapi import APIRouter, Depends

from ... import __version__
from ...db.store import WishlistStore
from ..deps import get_store

router = APIRouter()


@router.get("/healthz")
async def healthz(store: WishlistStore = Depends(get_store)) -> dict[str, object]:
    store_ok = await store.ping()
    return {"status": "ok", "version": __version__, "store": store_ok}
