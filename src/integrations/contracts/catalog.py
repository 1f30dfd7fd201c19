"""
Product catalogue contracts.

Defines the canonical product shape returned to the storefront, e.g.:
- sku, title, image, lastUpdated
- regularPrice and the per-size offers
- sourceTag telling live data apart from synthesized fallback data

These contracts must be used by both:
- clients/real_http/kicks_catalogue.py (payloads normalized by policy/product_normalizer.py)
- clients/mocks/local_product_catalogues.py (synthesized fallback products)

The storefront consumes the JSON form of `Product` verbatim, so field aliases
here ARE the public contract.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SourceTag(str, Enum):
    LIVE = "Live"
    FALLBACK = "Fallback"


class SizeOffer(BaseModel):
    """One size of a product. A price of 0 means no price is quoted."""

    model_config = ConfigDict(frozen=True)

    size: str
    price: float = Field(ge=0)
    available: bool = True


class ProductMeta(BaseModel):
    """Diagnostics attached to a product. Not stable across calls."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    available_sizes: int = Field(default=0, alias="availableSizes")
    total_sizes: int = Field(default=0, alias="totalSizes")
    endpoint: Optional[str] = None
    error: Optional[str] = None
    note: Optional[str] = None


class Product(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sku: str
    title: str = Field(min_length=1)
    image: str
    last_updated: str = Field(alias="lastUpdated")
    regular_price: float = Field(gt=0, alias="regularPrice")
    sizes: List[SizeOffer] = Field(min_length=1)
    source_tag: SourceTag = Field(default=SourceTag.LIVE, alias="sourceTag")
    meta: ProductMeta = Field(default_factory=ProductMeta)

    @property
    def is_fallback(self) -> bool:
        return self.source_tag == SourceTag.FALLBACK

    def to_public_dict(self) -> Dict[str, Any]:
        """JSON-ready dict using the storefront's camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def clean_sku(sku: str) -> str:
    """Trim whitespace around each `/`-delimited segment of a compound SKU."""
    return "/".join(part.strip() for part in (sku or "").split("/"))


def cache_key(identifier: str, market: str = "US") -> str:
    return f"{clean_sku(identifier)}-{market}"


def build_meta(sizes: List[SizeOffer], **extra: Any) -> ProductMeta:
    return ProductMeta(
        available_sizes=sum(1 for s in sizes if s.available),
        total_sizes=len(sizes),
        **extra,
    )
