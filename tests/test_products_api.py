import pytest
from fastapi.testclient import TestClient

from src.api.main import app, get_catalog_service
from tests.conftest import json_response


@pytest.fixture
def client_for(make_service):
    """TestClient whose CatalogService talks to the given RecordingUpstream."""

    def _client(upstream, **kwargs):
        service = make_service(upstream, **kwargs)
        app.dependency_overrides[get_catalog_service] = lambda: service
        return TestClient(app)

    yield _client
    app.dependency_overrides.clear()


def _assert_contract_headers(response):
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["content-type"].startswith("application/json")
    assert response.headers["cache-control"] == "no-store"


def test_get_product_end_to_end(upstream, client_for):
    upstream.routes = {
        "legacy.test/product/": json_response(
            {
                "title": "Shoe X",
                "retailPrice": "140",
                "variants": [
                    {"size": "9", "lowest_ask": 150, "total_asks": 2},
                    {"size": "10", "lowest_ask": 0, "total_asks": 0},
                ],
            }
        )
    }
    client = client_for(upstream)

    response = client.get("/api/products", params={"sku": "AAA-1/BBB-2", "market": "US"})

    assert response.status_code == 200
    _assert_contract_headers(response)
    body = response.json()
    assert body["sku"] == "AAA-1/BBB-2"
    assert body["title"] == "Shoe X"
    assert body["regularPrice"] == 140
    assert body["sizes"] == [
        {"size": "US 9", "price": 150, "available": True},
        {"size": "US 10", "price": 0, "available": False},
    ]
    assert body["sourceTag"] == "Live"


def test_netlify_path_serves_same_contract(upstream, client_for):
    upstream.routes = {"legacy.test/product/": json_response({"title": "Kai", "price": 100})}
    client = client_for(upstream)

    response = client.get("/.netlify/functions/kicksdb", params={"sku": "SKU-1"})

    assert response.status_code == 200
    assert response.json()["title"] == "Kai"


def test_total_upstream_failure_returns_flagged_fallback(upstream, client_for):
    client = client_for(upstream)

    response = client.get("/api/products", params={"sku": "AAA-1/BBB-2"})

    assert response.status_code == 200
    _assert_contract_headers(response)
    body = response.json()
    assert body["sourceTag"] == "Fallback"
    assert len(body["sizes"]) > 0
    assert body["meta"]["note"]


def test_missing_identifier_is_400(upstream, client_for):
    client = client_for(upstream)

    response = client.get("/api/products", params={"market": "US"})

    assert response.status_code == 400
    _assert_contract_headers(response)
    assert response.json() == {"error": "SKU or ID parameter is required"}


def test_missing_api_key_is_500(upstream, client_for):
    client = client_for(upstream, api_key="")

    response = client.get("/api/products", params={"sku": "SKU-1"})

    assert response.status_code == 500
    assert "API key not configured" in response.json()["error"]
    assert upstream.calls == []


def test_options_preflight_has_empty_body(upstream, client_for):
    client = client_for(upstream)

    response = client.options("/api/products")

    assert response.status_code == 200
    assert response.content == b""
    _assert_contract_headers(response)
    assert "GET" in response.headers["access-control-allow-methods"]


@pytest.mark.parametrize("method", ["POST", "PUT", "PATCH", "DELETE", "TRACE"])
def test_other_methods_are_405(upstream, client_for, method):
    client = client_for(upstream)

    response = client.request(method, "/api/products", params={"sku": "SKU-1"})

    assert response.status_code == 405
    assert response.json() == {"error": "Method not allowed"}
    _assert_contract_headers(response)


def test_head_is_405_with_contract_headers(upstream, client_for):
    client = client_for(upstream)

    response = client.head("/.netlify/functions/kicksdb", params={"sku": "SKU-1"})

    assert response.status_code == 405
    _assert_contract_headers(response)
    assert upstream.calls == []


def test_catalog_lists_featured_products(upstream, client_for, featured_products):
    upstream.routes = {"legacy.test/product/": json_response({"title": "Featured", "price": 110})}
    client = client_for(upstream, featured=featured_products)

    response = client.get("/api/catalog")

    assert response.status_code == 200
    body = response.json()
    assert body["market"] == "US"
    assert [p["sku"] for p in body["products"]] == ["AAA-1/BBB-2", "CCC-3"]


def test_health_reports_cache(upstream, client_for):
    client = client_for(upstream)

    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["cache"] == {"entries": 0, "ttlSeconds": 600.0}
