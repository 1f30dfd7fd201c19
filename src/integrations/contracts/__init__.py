"""
Contracts (data models).

This folder defines the shapes exchanged with the upstream catalogue:
- the canonical Product / SizeOffer returned to the storefront
- the declarative endpoint candidates tried by the resolver

Why this exists:
- Ensures consistent data structures across live and fallback clients
- Prevents "guessing" payload formats in multiple places
- Lets the storefront rely on one stable model instead of ad-hoc dicts

Both the real HTTP client and the local fallback catalogue use these contracts.
"""

from .catalog import (
    Product,
    ProductMeta,
    SizeOffer,
    SourceTag,
    build_meta,
    cache_key,
    clean_sku,
)
from .upstream import (
    AuthStyle,
    EndpointCandidate,
    LookupKind,
    ResolvedPayload,
    ShapeHint,
)

__all__ = [
    "Product", "ProductMeta", "SizeOffer", "SourceTag",
    "build_meta", "cache_key", "clean_sku",
    "AuthStyle", "EndpointCandidate", "LookupKind", "ResolvedPayload", "ShapeHint",
]
