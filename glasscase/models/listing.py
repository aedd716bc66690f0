from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

# Decimal internally, plain JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ListingRecord(CamelModel):
    title: str
    price: Money = Field(..., ge=0)
    url: str
    image_url: str | None = None
    timestamp: str  # end time (active) or sold date (completed), ISO-8601
    condition: str | None = None


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class PriceRange(CamelModel):
    min: Money = Decimal("0")
    max: Money = Decimal("0")


class MarketAnalysis(CamelModel):
    average_price: Money = Decimal("0")
    recent_sales: list[ListingRecord] = []
    price_range: PriceRange = PriceRange()
    confidence: Confidence = Confidence.LOW


class MarketEstimate(MarketAnalysis):
    search_terms_used: list[str] = []
