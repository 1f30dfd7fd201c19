"""
Local Product Catalogue Client (Fallback).

Purpose:
- Synthesizes product data when the upstream catalogue cannot be reached.
- Knows the storefront's featured SKUs (names, official prices, images) from
  config/catalog_config.yml; any other SKU gets a generic placeholder product.

Behavior:
- Every size of the ladder is available with probability `availability_rate`;
  available sizes are priced at the base price +/- `price_spread`, the rest at 0.
- The pseudo-random source is seeded from the configured seed and the SKU, so a
  given SKU always yields the same ladder for a deployment.
- Products are tagged SourceTag.FALLBACK so the storefront can tell them apart.
"""

import logging
import random
from datetime import datetime, timezone
from typing import Callable, List, Optional

from src.integrations.contracts.catalog import (
    Product,
    SizeOffer,
    SourceTag,
    build_meta,
    clean_sku,
)
from src.utils.config_loader import FallbackConfig, FallbackProduct

logger = logging.getLogger(__name__)


class LocalProductCatalogue:
    """
    Fallback product source.

    Parameters
    ----------
    config : FallbackConfig
        Known products, size ladder and randomization settings.
    seed : int, optional
        Overrides config.seed; tests use this to pin the output.
    clock : callable, optional
        Returns the capture time stamped on synthesized products.
    """

    def __init__(
        self,
        config: Optional[FallbackConfig] = None,
        seed: Optional[int] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.config = config or FallbackConfig()
        self.seed = self.config.seed if seed is None else seed
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _rng_for(self, sku: str) -> random.Random:
        return random.Random(f"{self.seed}:{sku}")

    def lookup(self, sku: str) -> FallbackProduct:
        known = self.config.products.get(clean_sku(sku))
        if known is not None:
            return known
        return FallbackProduct(
            name=f"Product {clean_sku(sku)}",
            price=self.config.base_price,
            image=self.config.placeholder_image,
        )

    def size_ladder(self, sku: str, base_price: float) -> List[SizeOffer]:
        rng = self._rng_for(clean_sku(sku))
        sizes: List[SizeOffer] = []
        for label in self.config.size_range:
            available = rng.random() < self.config.availability_rate
            variation = rng.uniform(-self.config.price_spread, self.config.price_spread)
            price = round(max(base_price + variation, 0.01), 2) if available else 0.0
            sizes.append(SizeOffer(size=f"US {label}", price=price, available=available))
        return sizes

    def get_product(self, sku: str, reason: Optional[str] = None) -> Product:
        cleaned = clean_sku(sku)
        info = self.lookup(cleaned)
        sizes = self.size_ladder(cleaned, info.price)
        logger.info("[FALLBACK] Synthesized %d sizes for %s", len(sizes), cleaned)
        return Product(
            sku=cleaned,
            title=info.name,
            image=info.image,
            last_updated=self._clock().isoformat(),
            regular_price=info.price,
            sizes=sizes,
            source_tag=SourceTag.FALLBACK,
            meta=build_meta(sizes, error=reason, note="Using fallback data - API connection failed"),
        )
