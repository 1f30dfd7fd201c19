"""
KicksDB / kicks.dev Product Catalogue HTTP Client.

Purpose:
- Resolves a SKU or upstream product id to a raw product payload
- Tries the configured endpoint candidates in order until one answers with JSON

Usage:
- Wired in src/api/main.py with the candidates from config/catalog_config.yml
- Called by CatalogService; the payload is normalized by policy/product_normalizer.py

Implementation notes:
- A candidate fails on a non-2xx status, a timeout or transport error, an HTML
  error page, unparseable JSON, an explicit {"success": false}, or an empty
  search result. Failures are logged and the next candidate is tried.
- No candidate is retried. Exhaustion raises ResolutionFailure.

Important:
- This client should be the ONLY place that talks to the upstream catalogue.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from src.error_handler import ResolutionFailure, UpstreamCandidateFailure
from src.integrations.contracts.upstream import (
    AuthStyle,
    EndpointCandidate,
    LookupKind,
    ResolvedPayload,
    ShapeHint,
)
from src.utils.config_loader import DEFAULT_CANDIDATES

logger = logging.getLogger(__name__)


def select_best_match(results: Sequence[Dict[str, Any]], identifier: str) -> Dict[str, Any]:
    """
    Pick the search hit whose `sku` contains the most `/`-segments of the
    requested identifier. Ties keep the earliest hit; no match keeps the first.
    """
    parts = [part.strip().lower() for part in identifier.split("/") if part.strip()]
    best, best_score = results[0], 0
    for result in results:
        candidate_sku = str(result.get("sku") or "").lower()
        score = sum(1 for part in parts if part in candidate_sku)
        if score > best_score:
            best, best_score = result, score
    return best


def _search_results(payload: Any) -> Optional[List[Any]]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        return payload["data"]
    return None


class KicksCatalogueClient:
    def __init__(
        self,
        api_key: str,
        candidates: Optional[Sequence[EndpointCandidate]] = None,
        timeout_seconds: float = 5.0,
        user_agent: str = "Courts-StockX-App/1.0",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.candidates = list(candidates if candidates is not None else DEFAULT_CANDIDATES)
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent
        self._transport = transport

    def candidates_for(self, is_id_lookup: bool) -> List[EndpointCandidate]:
        """Id candidates first (only for id lookups), then the sku candidates."""
        by_id = [c for c in self.candidates if c.lookup == LookupKind.ID]
        by_sku = [c for c in self.candidates if c.lookup == LookupKind.SKU]
        return by_id + by_sku if is_id_lookup else by_sku

    def _headers(self, candidate: EndpointCandidate) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }
        if candidate.auth_style == AuthStyle.MULTI_HEADER:
            headers["X-API-Key"] = self.api_key
            headers["apikey"] = self.api_key
        return headers

    async def resolve(self, identifier: str, is_id_lookup: bool = False, market: str = "US") -> ResolvedPayload:
        candidates = self.candidates_for(is_id_lookup)
        attempts: List[str] = []
        last_error: Optional[UpstreamCandidateFailure] = None

        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
            for candidate in candidates:
                try:
                    resolved = await self._try_candidate(client, candidate, identifier, market)
                except UpstreamCandidateFailure as e:
                    logger.info("Candidate %s failed for %s: %s", candidate.name, identifier, e)
                    attempts.append(f"{candidate.name}: {e}")
                    last_error = e
                    continue

                resolved.attempts = attempts + [f"{candidate.name}: ok"]
                logger.info("Resolved %s via %s", identifier, candidate.name)
                return resolved

        reason = str(last_error) if last_error else "no endpoint candidates configured"
        logger.warning("All %d upstream candidates failed for %s", len(candidates), identifier)
        raise ResolutionFailure(f"All upstream endpoints failed for {identifier}: {reason}", identifier=identifier)

    async def _try_candidate(
        self,
        client: httpx.AsyncClient,
        candidate: EndpointCandidate,
        identifier: str,
        market: str,
    ) -> ResolvedPayload:
        url = candidate.render_url(identifier, market)
        params = candidate.render_params(identifier, market)
        logger.debug("Trying endpoint %s: %s", candidate.name, url)

        try:
            response = await client.get(url, params=params or None, headers=self._headers(candidate))
        except httpx.TimeoutException as e:
            raise UpstreamCandidateFailure(f"timed out after {self.timeout_seconds}s", endpoint=candidate.name) from e
        except httpx.RequestError as e:
            raise UpstreamCandidateFailure(f"request error: {e}", endpoint=candidate.name) from e

        if not response.is_success:
            raise UpstreamCandidateFailure(
                f"HTTP {response.status_code}", endpoint=candidate.name, status=response.status_code
            )

        payload = self._parse_body(response.text, candidate.name)
        if isinstance(payload, dict) and payload.get("success") is False:
            raise UpstreamCandidateFailure("upstream reported success=false", endpoint=candidate.name)

        matched_sku = None
        results = _search_results(payload)
        if results is not None:
            hits = [r for r in results if isinstance(r, dict)]
            if not hits:
                raise UpstreamCandidateFailure("no products in search results", endpoint=candidate.name)
            payload = select_best_match(hits, identifier)
            matched_sku = payload.get("sku")
        elif candidate.shape_hint == ShapeHint.SEARCH_RESULTS:
            raise UpstreamCandidateFailure("expected search results", endpoint=candidate.name)
        elif isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            payload = payload["data"]

        return ResolvedPayload(payload=payload, endpoint=candidate.name, url=str(response.url), matched_sku=matched_sku)

    @staticmethod
    def _parse_body(text: str, endpoint: str) -> Any:
        stripped = text.lstrip()
        if not stripped or stripped[0] not in "{[":
            # Typically an HTML error page served with a 200.
            raise UpstreamCandidateFailure("response body is not JSON", endpoint=endpoint)
        try:
            return json.loads(stripped)
        except (ValueError, RecursionError) as e:
            # ValueError covers JSONDecodeError and the int-digit limit.
            raise UpstreamCandidateFailure(f"invalid JSON: {e}", endpoint=endpoint) from e
