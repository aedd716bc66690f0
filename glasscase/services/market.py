from __future__ import annotations

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from ..models.listing import Confidence, ListingRecord, MarketAnalysis, PriceRange

RECENT_SALES_LIMIT = 10
HIGH_CONFIDENCE_MIN_SALES = 5
MEDIUM_CONFIDENCE_MIN_SALES = 3
MAX_HIGH_CONFIDENCE_VARIATION = Decimal("0.3")

_CENTS = Decimal("0.01")


def round_price(value: Decimal) -> Decimal:
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


def confidence_for(prices: Sequence[Decimal]) -> Confidence:
    """Grade a price sample by its size and, for larger samples, its spread.

    Spread is measured relative to the first (most recent) price.
    """
    n = len(prices)
    if n >= HIGH_CONFIDENCE_MIN_SALES:
        reference = prices[0]
        if reference <= 0:
            return Confidence.MEDIUM
        variation = (max(prices) - min(prices)) / reference
        return Confidence.HIGH if variation < MAX_HIGH_CONFIDENCE_VARIATION else Confidence.MEDIUM
    if n >= MEDIUM_CONFIDENCE_MIN_SALES:
        return Confidence.MEDIUM
    return Confidence.LOW


def analyze(sales: Sequence[ListingRecord]) -> MarketAnalysis:
    """Summarise sold listings, ordered most-recent-first, into an estimate.

    The point estimate is the most recent sale price rather than a mean; the
    field keeps its historical ``averagePrice`` name on the wire.
    """
    if not sales:
        return MarketAnalysis(
            average_price=Decimal("0"),
            recent_sales=[],
            price_range=PriceRange(min=Decimal("0"), max=Decimal("0")),
            confidence=Confidence.LOW,
        )

    prices = [s.price for s in sales]
    return MarketAnalysis(
        average_price=round_price(prices[0]),
        recent_sales=list(sales[:RECENT_SALES_LIMIT]),
        price_range=PriceRange(min=round_price(min(prices)), max=round_price(max(prices))),
        confidence=confidence_for(prices),
    )
