from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.responses import Response

from ...clients.ebay import ListingClient
from ...logging import get_logger
from ...models.item import ItemAttributes
from ...models.listing import CamelModel, MarketEstimate
from ...services.estimator import MarketEstimator
from ..deps import get_listing_client
from ._common import preflight_response, read_json_body

router = APIRouter(tags=["market"])

_log = get_logger()


class MarketAnalysisRequest(CamelModel):
    item_name: str | None = None
    manufacturer: str | None = None
    pattern: str | None = None
    category: str | None = None
    description: str | None = None
    photo_url: str | None = None


def _parse_request(payload: object) -> ItemAttributes:
    try:
        req = MarketAnalysisRequest.model_validate(payload)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=f"invalid request body: {exc.error_count()} error(s)")
    if not (req.item_name and req.item_name.strip()) or not (req.category and req.category.strip()):
        raise HTTPException(status_code=400, detail="Item name and category are required")
    return ItemAttributes(
        name=req.item_name,
        category=req.category.strip(),
        manufacturer=req.manufacturer,
        pattern=req.pattern,
        description=req.description,
    )


@router.options("/market-analysis")
async def market_analysis_preflight() -> Response:
    return preflight_response()


@router.post("/market-analysis", response_model=MarketEstimate)
async def market_analysis(
    request: Request,
    client: ListingClient = Depends(get_listing_client),
) -> MarketEstimate | JSONResponse:
    try:
        payload = await read_json_body(request)
    except ValueError:
        raise HTTPException(status_code=400, detail="request body is not valid JSON")
    attrs = _parse_request(payload)

    try:
        return await MarketEstimator(client).estimate(attrs)
    except Exception as exc:
        _log.error("market_analysis_failed", item=attrs.name, error=str(exc))
        return JSONResponse(
            status_code=500,
            content={"detail": "Failed to analyze market data", "error": str(exc)},
        )
