from src.fallback_handler import FallbackHandler
from src.integrations.clients.mocks.local_product_catalogues import LocalProductCatalogue
from src.integrations.contracts.catalog import SourceTag
from src.utils.config_loader import FallbackConfig, FallbackProduct
from tests.conftest import FIXED_NOW

KNOWN_SKU = "112441113-13/1124D1113-13"


def _catalogue(seed=1, **overrides):
    config = FallbackConfig(
        seed=seed,
        products={KNOWN_SKU: FallbackProduct(name="Anta Kai 1 Jelly", price=118.0, image="https://img.test/kai1.jpg")},
        **overrides,
    )
    return LocalProductCatalogue(config, clock=lambda: FIXED_NOW)


def test_known_sku_uses_configured_product():
    product = _catalogue().get_product("112441113-13 / 1124D1113-13", reason="down")
    assert product.sku == KNOWN_SKU
    assert product.title == "Anta Kai 1 Jelly"
    assert product.regular_price == 118.0
    assert product.image == "https://img.test/kai1.jpg"
    assert product.source_tag == SourceTag.FALLBACK
    assert product.meta.error == "down"
    assert product.last_updated == FIXED_NOW.isoformat()


def test_unknown_sku_gets_placeholder_product():
    product = _catalogue().get_product("ZZZ-1")
    assert product.title == "Product ZZZ-1"
    assert product.regular_price == 120.0


def test_ladder_is_deterministic_per_seed_and_sku():
    first = _catalogue(seed=3).get_product("ZZZ-1")
    second = _catalogue(seed=3).get_product("ZZZ-1")
    assert first.sizes == second.sizes


def test_ladder_covers_configured_range_and_prices_unavailable_at_zero():
    product = _catalogue(seed=11).get_product("ZZZ-1")
    assert [s.size for s in product.sizes][0] == "US 6.5"
    assert [s.size for s in product.sizes][-1] == "US 15"
    assert len(product.sizes) == 17
    for size in product.sizes:
        if size.available:
            assert 100.0 <= size.price <= 140.0
        else:
            assert size.price == 0
    assert product.meta.total_sizes == 17
    assert product.meta.available_sizes == sum(1 for s in product.sizes if s.available)


def test_availability_rate_bounds():
    all_in = _catalogue(availability_rate=1.0).get_product("ZZZ-1")
    none_in = _catalogue(availability_rate=0.0).get_product("ZZZ-1")
    assert all(s.available for s in all_in.sizes)
    assert not any(s.available for s in none_in.sizes)


def test_handler_counts_triggers_and_flags_product():
    handler = FallbackHandler(_catalogue())
    product = handler.generate_fallback("ZZZ-1", error="All upstream endpoints failed")
    handler.generate_fallback("ZZZ-2")

    assert handler.triggers == 2
    assert product.is_fallback
    assert product.sizes
    assert product.meta.error == "All upstream endpoints failed"
