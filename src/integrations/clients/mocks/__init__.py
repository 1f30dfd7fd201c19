"""
Local (fallback) integration clients.

These clients return synthesized (but realistic) product data without calling
any external API. They are used when:
- Every upstream catalogue endpoint failed for a request
- Tests need a product without touching the network

A missing API key is a configuration error, not a reason to fall back.

Important:
- Local clients must return the SAME Product contract as the real HTTP path.
- Their products are always tagged SourceTag.FALLBACK.
"""

from .local_product_catalogues import LocalProductCatalogue

__all__ = ["LocalProductCatalogue"]
