"""Fallback handling utilities.

When the upstream catalogue cannot produce a product, the gateway still answers
with a usable Product so the storefront never renders a broken detail page.
Availability is preferred over correctness; fallback data is always flagged.
"""
from typing import Optional

import logging
from src.integrations.clients.mocks.local_product_catalogues import LocalProductCatalogue
from src.integrations.contracts.catalog import Product

logger = logging.getLogger(__name__)


class FallbackHandler:
    """Generates fallback products and logs triggers for telemetry."""

    def __init__(self, catalogue: Optional[LocalProductCatalogue] = None):
        self.catalogue = catalogue or LocalProductCatalogue()
        self.triggers = 0

    def generate_fallback(self, identifier: str, reason: str = "upstream_unavailable", error: Optional[str] = None) -> Product:
        self.triggers += 1
        logger.warning("Serving fallback data for %s: reason=%s, error=%s", identifier, reason, error)
        return self.catalogue.get_product(identifier, reason=error or reason)
