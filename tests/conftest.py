"""Pytest fixtures for the catalog gateway tests."""

import json
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List

import httpx
import pytest

from src.database.product_cache import ProductCache
from src.fallback_handler import FallbackHandler
from src.integrations.clients.mocks.local_product_catalogues import LocalProductCatalogue
from src.integrations.clients.real_http.kicks_catalogue import KicksCatalogueClient
from src.integrations.contracts.upstream import EndpointCandidate, LookupKind, ShapeHint
from src.integrations.policy.catalog_service import CatalogService
from src.utils.config_loader import FallbackConfig, FeaturedProduct

FIXED_NOW = datetime(2024, 9, 15, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingUpstream:
    """
    httpx.MockTransport handler that records calls and answers by the longest
    matching "host/path" prefix. Unmatched requests get a 404.
    """

    def __init__(self, routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = None, default=None):
        self.routes = routes or {}
        self.default = default or (lambda request: httpx.Response(404, json={"error": "not found"}))
        self.calls: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        target = f"{request.url.host}{request.url.path}"
        for prefix in sorted(self.routes, key=len, reverse=True):
            if target.startswith(prefix):
                return self.routes[prefix](request)
        return self.default(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def called_paths(self) -> List[str]:
        return [f"{r.url.host}{r.url.path}" for r in self.calls]


def json_response(body: Any, status: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(status, content=json.dumps(body).encode(), headers={"Content-Type": "application/json"})


def text_response(text: str, status: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(status, text=text)


TEST_CANDIDATES = [
    EndpointCandidate(name="by-id", url_template="https://api.test/v3/products/{identifier}", lookup=LookupKind.ID),
    EndpointCandidate(
        name="search",
        url_template="https://api.test/v3/products",
        shape_hint=ShapeHint.SEARCH_RESULTS,
        params={"query": "{identifier}", "limit": "5"},
    ),
    EndpointCandidate(name="legacy", url_template="https://legacy.test/product/{identifier}"),
]


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def upstream():
    return RecordingUpstream()


@pytest.fixture
def fallback_config():
    return FallbackConfig(seed=7, products={})


@pytest.fixture
def make_service(fake_clock, fallback_config):
    """Build a CatalogService around a RecordingUpstream."""

    def _make(upstream: RecordingUpstream, api_key: str = "test-key", candidates=None, featured=None, ttl: float = 600.0):
        resolver = KicksCatalogueClient(
            api_key=api_key,
            candidates=candidates if candidates is not None else TEST_CANDIDATES,
            timeout_seconds=1.0,
            transport=upstream.transport,
        )
        return CatalogService(
            resolver=resolver,
            cache=ProductCache(ttl_seconds=ttl, clock=fake_clock),
            fallback_handler=FallbackHandler(LocalProductCatalogue(fallback_config, clock=lambda: FIXED_NOW)),
            featured=featured or [],
            clock=lambda: FIXED_NOW,
        )

    return _make


@pytest.fixture
def featured_products():
    return [
        FeaturedProduct(name="Kai 1", sku="AAA-1/BBB-2"),
        FeaturedProduct(name="Kai 2", sku="CCC-3"),
    ]
