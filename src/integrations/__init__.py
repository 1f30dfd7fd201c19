"""
Integrations layer.
This package contains all code used to communicate with the external sneaker
catalogue (KicksDB / kicks.dev) and to shape its data for the storefront:
- contracts: the canonical Product model and the endpoint candidate model
- clients/real_http: the upstream HTTP resolver
- clients/mocks: the local fallback catalogue
- policy: normalization and the catalog service used by the API

Key rule:
- API routes MUST NOT call the upstream directly; they go through CatalogService.

Switching implementations:
- Wiring of clients happens in ONE place (src/api/main.py).
"""

from .contracts.catalog import Product, ProductMeta, SizeOffer, SourceTag
from .contracts.upstream import AuthStyle, EndpointCandidate, LookupKind, ResolvedPayload, ShapeHint

__all__ = [
    "Product", "ProductMeta", "SizeOffer", "SourceTag",
    "AuthStyle", "EndpointCandidate", "LookupKind", "ResolvedPayload", "ShapeHint",
]
