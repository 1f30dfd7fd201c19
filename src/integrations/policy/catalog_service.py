"""
Catalog Service

Resolves storefront product requests:
- validates the request and the upstream credential
- serves cached products while they are fresh
- otherwise resolves the upstream payload, normalizes it and caches the result
- falls back to synthesized, flagged data when every upstream endpoint fails
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from src.database.product_cache import ProductCache
from src.error_handler import ConfigurationError, InvalidRequest, ResolutionFailure
from src.fallback_handler import FallbackHandler
from src.integrations.clients.real_http.kicks_catalogue import KicksCatalogueClient
from src.integrations.contracts.catalog import Product, cache_key, clean_sku
from src.integrations.policy.product_normalizer import normalize_product
from src.utils.config_loader import FeaturedProduct, NormalizerConfig

logger = logging.getLogger(__name__)


class CatalogService:
    def __init__(
        self,
        resolver: KicksCatalogueClient,
        cache: ProductCache,
        fallback_handler: FallbackHandler,
        normalizer_config: Optional[NormalizerConfig] = None,
        featured: Optional[Sequence[FeaturedProduct]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.resolver = resolver
        self.cache = cache
        self.fallback_handler = fallback_handler
        self.normalizer_config = normalizer_config or NormalizerConfig()
        self.featured = list(featured or [])
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def get_product(self, sku: Optional[str] = None, product_id: Optional[str] = None, market: str = "US") -> Product:
        """
        Return the product for `product_id` (preferred) or `sku`.

        Raises InvalidRequest without an identifier and ConfigurationError when
        no upstream API key is configured. Upstream failures never raise: they
        produce a Product tagged Fallback.
        """
        product_id = (product_id or "").strip() or None
        sku = clean_sku(sku) if sku and sku.strip() else None
        if not product_id and not sku:
            raise InvalidRequest("SKU or ID parameter is required")
        if not self.resolver.api_key:
            raise ConfigurationError("Server configuration error - API key not configured")

        market = (market or "US").strip() or "US"
        identifier = product_id or sku
        key = cache_key(identifier, market)

        cached = self.cache.get(key)
        if cached is not None:
            logger.info("Cache hit for %s", key)
            return cached

        logger.info("Cache miss for %s, resolving upstream", key)
        is_id_lookup = product_id is not None
        try:
            resolved = await self.resolver.resolve(identifier, is_id_lookup=is_id_lookup, market=market)
        except ResolutionFailure as e:
            product = self.fallback_handler.generate_fallback(identifier, error=str(e))
        else:
            product = normalize_product(
                resolved.payload,
                identifier,
                config=self.normalizer_config,
                endpoint=resolved.endpoint,
                upstream_sku=is_id_lookup,
                captured_at=self._clock(),
            )

        self.cache.put(key, product)
        return product

    async def get_featured(self, market: str = "US") -> List[Product]:
        """Resolve every featured product concurrently, in configured order."""
        return list(await asyncio.gather(*(self.get_product(sku=item.sku, market=market) for item in self.featured)))
