"""
Upstream catalogue contracts.

Describes the candidate endpoints the resolver tries, and what it hands back
when one of them answers. Candidates are data: adding a vendor endpoint means
adding an entry to config/catalog_config.yml, not a new client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from pydantic import BaseModel, Field


class LookupKind(str, Enum):
    ID = "id"
    SKU = "sku"


class AuthStyle(str, Enum):
    BEARER = "bearer"
    # Bearer plus the X-API-Key / apikey headers some tiers expect.
    MULTI_HEADER = "multi_header"


class ShapeHint(str, Enum):
    PRODUCT = "product"
    SEARCH_RESULTS = "search_results"


class EndpointCandidate(BaseModel):
    name: str
    url_template: str
    lookup: LookupKind = LookupKind.SKU
    auth_style: AuthStyle = AuthStyle.BEARER
    shape_hint: ShapeHint = ShapeHint.PRODUCT
    params: Dict[str, str] = Field(default_factory=dict)

    def render_url(self, identifier: str, market: str = "US") -> str:
        return self.url_template.format(
            identifier=quote(identifier, safe=""),
            market=quote(market, safe=""),
        )

    def render_params(self, identifier: str, market: str = "US") -> Dict[str, str]:
        return {k: v.format(identifier=identifier, market=market) for k, v in self.params.items()}


@dataclass
class ResolvedPayload:
    """Parsed JSON from the first candidate that answered successfully."""

    payload: Dict[str, Any]
    endpoint: str
    url: str
    attempts: List[str] = field(default_factory=list)
    matched_sku: Optional[str] = None
