from __future__ import annotations

from decimal import Decimal

from glasscase.models.listing import Confidence, ListingRecord
from glasscase.services.market import analyze


def _sale(price: str | int, idx: int = 0) -> ListingRecord:
    return ListingRecord(
        title=f"Sale {idx}",
        price=Decimal(str(price)),
        url=f"https://www.ebay.com/itm/{idx}",
        timestamp=f"2024-05-{30 - idx:02d}T10:00:00.000Z",
    )


def _sales(prices: list[str | int]) -> list[ListingRecord]:
    return [_sale(p, i) for i, p in enumerate(prices)]


def test_empty_sales() -> None:
    res = analyze([])
    assert res.model_dump(by_alias=True, mode="json") == {
        "averagePrice": 0.0,
        "recentSales": [],
        "priceRange": {"min": 0.0, "max": 0.0},
        "confidence": "low",
    }


def test_six_tight_sales_high_confidence() -> None:
    res = analyze(_sales([100, 105, 98, 102, 99, 101]))
    assert res.average_price == Decimal("100.00")
    assert res.price_range.min == Decimal("98.00")
    assert res.price_range.max == Decimal("105.00")
    assert res.confidence == Confidence.HIGH


def test_equal_prices_high_confidence() -> None:
    res = analyze(_sales([42] * 7))
    assert res.confidence == Confidence.HIGH


def test_wide_spread_medium_confidence() -> None:
    res = analyze(_sales([100, 200, 50, 120, 90]))
    assert res.confidence == Confidence.MEDIUM


def test_three_sales_always_medium() -> None:
    assert analyze(_sales([10, 1000, 5])).confidence == Confidence.MEDIUM
    assert analyze(_sales([10, 10, 10, 10])).confidence == Confidence.MEDIUM


def test_one_or_two_sales_low() -> None:
    assert analyze(_sales([10])).confidence == Confidence.LOW
    assert analyze(_sales([10, 10])).confidence == Confidence.LOW


def test_average_price_is_most_recent_not_mean() -> None:
    res = analyze(_sales([10, 90, 90, 90]))
    assert res.average_price == Decimal("10.00")


def test_rounding_half_up() -> None:
    res = analyze(_sales(["10.005", "3.125", "20.994"]))
    assert res.average_price == Decimal("10.01")
    assert res.price_range.min == Decimal("3.13")
    assert res.price_range.max == Decimal("20.99")


def test_recent_sales_capped_at_ten_in_order() -> None:
    sales = _sales(list(range(1, 16)))
    res = analyze(sales)
    assert [s.title for s in res.recent_sales] == [s.title for s in sales[:10]]
