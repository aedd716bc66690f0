from __future__ import annotations

from ..clients.ebay import ListingClient
from ..logging import get_logger
from ..models.item import ItemAttributes
from ..models.listing import MarketEstimate
from .market import analyze
from .search_terms import generate

_log = get_logger()


class MarketEstimator:
    def __init__(self, client: ListingClient, terms_limit: int | None = None) -> None:
        self.client = client
        self.terms_limit = terms_limit

    async def estimate(self, attrs: ItemAttributes) -> MarketEstimate:
        terms = generate(attrs)
        _log.info("search_terms_generated", item=attrs.name, category=attrs.category, terms=terms)

        sales = await self.client.search_completed(terms, self.terms_limit)
        # Most recent sale first; ISO-8601 strings in one zone sort chronologically
        sales = sorted(sales, key=lambda s: s.timestamp, reverse=True)
        analysis = analyze(sales)
        _log.info(
            "market_analysis_completed",
            item=attrs.name,
            sales=len(sales),
            average_price=str(analysis.average_price),
            confidence=analysis.confidence.value,
        )
        return MarketEstimate(**analysis.model_dump(), search_terms_used=terms)
