"""
Product normalization.

Maps any of the upstream payload shapes we have seen (KicksDB product,
kicks.dev StockX product, search hits, asks/bids lists, per-size market
statistics) onto the canonical Product contract.

Every field is resolved through an ordered tuple of extractors; the first one
that yields a value wins. The tuples below are the fallback order.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from src.error_handler import NoValidPrice, NoValidSizes
from src.integrations.contracts.catalog import Product, SizeOffer, SourceTag, build_meta, clean_sku
from src.utils.config_loader import NormalizerConfig

logger = logging.getLogger(__name__)


class Extractor(NamedTuple):
    source: str
    extract: Callable[[Dict[str, Any]], Optional[Any]]


# ---------------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------------

def _to_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, (int, float, str)):
        return None
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        # OverflowError: JSON integers beyond the float range.
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _to_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _first_present(data: Dict[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


# ---------------------------------------------------------------------------
# Extractor builders
# ---------------------------------------------------------------------------

def _text(key: str) -> Extractor:
    return Extractor(key, lambda data: _to_text(data.get(key)))


def _amount(key: str, divisor: float = 1.0) -> Extractor:
    def extract(data: Dict[str, Any]) -> Optional[float]:
        number = _to_number(data.get(key))
        if number is None:
            return None
        amount = number / divisor
        # Sub-cent amounts would round to a zero regularPrice.
        return amount if amount >= 0.01 else None

    return Extractor(key, extract)


def _first_item_text(key: str, subkey: Optional[str] = None) -> Extractor:
    def extract(data: Dict[str, Any]) -> Optional[str]:
        items = data.get(key)
        if not isinstance(items, list) or not items:
            return None
        first = items[0]
        if isinstance(first, dict):
            if subkey:
                return _to_text(first.get(subkey))
            return _to_text(first.get("url") or first.get("imageUrl"))
        return _to_text(first)

    label = f"{key}[0].{subkey}" if subkey else f"{key}[0]"
    return Extractor(label, extract)


def _trait_amount(trait: str) -> Extractor:
    def extract(data: Dict[str, Any]) -> Optional[float]:
        traits = data.get("traits")
        if not isinstance(traits, list):
            return None
        for item in traits:
            if isinstance(item, dict) and item.get("trait") == trait:
                number = _to_number(item.get("value"))
                if number is not None and number > 0:
                    return number
        return None

    return Extractor(f"traits[{trait}]", extract)


TITLE_EXTRACTORS: Tuple[Extractor, ...] = (
    _text("title"),
    _text("name"),
    _text("product_name"),
    _text("productName"),
)

IMAGE_EXTRACTORS: Tuple[Extractor, ...] = (
    _text("image"),
    _text("thumbnail"),
    _text("imageUrl"),
    _first_item_text("media", "imageUrl"),
    _first_item_text("images"),
    _first_item_text("gallery"),
)

UPDATED_EXTRACTORS: Tuple[Extractor, ...] = (
    _text("updated_at"),
    _text("lastUpdated"),
    _text("last_updated"),
)

PRICE_EXTRACTORS: Tuple[Extractor, ...] = (
    _amount("retailPrice"),
    _amount("retail_price_cents", divisor=100),
    _trait_amount("Retail Price"),
    _amount("msrp"),
    _amount("basePrice"),
    _amount("lowestAsk"),
    _amount("lowest_ask"),
    _amount("min_price"),
    _amount("price"),
    _amount("averagePrice"),
)


def first_some(extractors: Sequence[Extractor], data: Dict[str, Any]) -> Tuple[Optional[str], Optional[Any]]:
    """Return (source, value) of the first extractor that yields a value."""
    for extractor in extractors:
        value = extractor.extract(data)
        if value is not None:
            return extractor.source, value
    return None, None


# ---------------------------------------------------------------------------
# Sizes
# ---------------------------------------------------------------------------

_VARIANT_SIZE_KEYS = ("size", "us_size", "usSize")
_VARIANT_PRICE_KEYS = ("price", "lowest_ask", "lowestAsk", "ask")
_OFFER_SIZE_KEYS = ("size", "shoe_size", "shoeSize")
_OFFER_PRICE_KEYS = ("price", "amount")
_STATS_PRICE_KEYS = ("lowest_ask", "last_sale")
_STATS_MAP_KEYS = ("market_data", "marketData", "market_stats")
_LIVE_MARKET_KEYS = ("total_asks", "totalAsks", "total_bids", "totalBids", "sales_last_72h", "salesLast72h")
_ASK_COUNT_KEYS = ("total_asks", "totalAsks")

_SIZE_LABEL_RE = re.compile(r"^(?:us)?[\s_]*(\d+(?:[._]\d+)?)$", re.IGNORECASE)


class _SizeDraft(NamedTuple):
    label: Optional[str]
    price: Optional[float]
    available: bool


def normalize_size_label(raw: Any) -> Optional[str]:
    """'9' -> 'US 9', 'US_8_5' -> 'US 8.5'. Unparseable labels are kept trimmed."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        raw = str(raw)
    text = _to_text(raw)
    if text is None or text.lower() == "unknown":
        return None
    match = _SIZE_LABEL_RE.match(text)
    if not match:
        return text
    whole, _, fraction = match.group(1).replace("_", ".").partition(".")
    whole = whole.lstrip("0") or "0"
    fraction = fraction.rstrip("0")
    return f"US {whole}.{fraction}" if fraction else f"US {whole}"


def _offer_price(entry: Dict[str, Any], keys: Sequence[str], default: float) -> Optional[float]:
    raw = _first_present(entry, keys)
    if raw is None:
        return default
    # Present but not numeric: dropped by the post-filter.
    return _to_number(raw)


def _has_live_market_fields(entry: Dict[str, Any]) -> bool:
    return any(entry.get(key) is not None for key in _LIVE_MARKET_KEYS)


def _live_market_available(entry: Dict[str, Any], price: Optional[float]) -> bool:
    ask_count = _to_number(_first_present(entry, _ASK_COUNT_KEYS)) or 0
    return price is not None and price > 0 and ask_count > 0


def _variant_draft(entry: Dict[str, Any], regular_price: float) -> _SizeDraft:
    price = _offer_price(entry, _VARIANT_PRICE_KEYS, regular_price)
    if _has_live_market_fields(entry):
        available = _live_market_available(entry, price)
    else:
        available = entry.get("available") is not False
        stock = entry.get("stock")
        if stock is not None:
            stock_level = _to_number(stock)
            if stock_level is None or stock_level <= 0:
                available = False
    return _SizeDraft(normalize_size_label(_first_present(entry, _VARIANT_SIZE_KEYS)), price, available)


def _offer_draft(entry: Dict[str, Any], regular_price: float) -> _SizeDraft:
    price = _offer_price(entry, _OFFER_PRICE_KEYS, regular_price)
    # An open ask or bid implies the size trades.
    available = _live_market_available(entry, price) if _has_live_market_fields(entry) else True
    return _SizeDraft(normalize_size_label(_first_present(entry, _OFFER_SIZE_KEYS)), price, available)


def _stats_draft(label: str, entry: Dict[str, Any]) -> _SizeDraft:
    price = _offer_price(entry, _STATS_PRICE_KEYS, 0.0)
    if _has_live_market_fields(entry):
        available = _live_market_available(entry, price)
    else:
        available = entry.get("lowest_ask") is not None
    return _SizeDraft(normalize_size_label(label), price, available)


_LIST_SHAPES: Tuple[Tuple[str, Callable[[Dict[str, Any], float], _SizeDraft]], ...] = (
    ("variants", _variant_draft),
    ("sizes", _variant_draft),
    ("asks", _offer_draft),
    ("bids", _offer_draft),
)


def extract_size_drafts(data: Dict[str, Any], regular_price: float) -> Tuple[Optional[str], List[_SizeDraft]]:
    """Return (shape, drafts) for the first size shape present in the payload."""
    for key, build in _LIST_SHAPES:
        entries = data.get(key)
        if isinstance(entries, list):
            drafts = [build(e, regular_price) if isinstance(e, dict) else _SizeDraft(None, None, False) for e in entries]
            return key, drafts

    for key in _STATS_MAP_KEYS:
        stats = data.get(key)
        if isinstance(stats, dict) and stats and all(isinstance(v, dict) for v in stats.values()):
            return key, [_stats_draft(label, entry) for label, entry in stats.items()]

    return None, []


def _finalize_sizes(drafts: Iterable[_SizeDraft]) -> List[SizeOffer]:
    sizes: List[SizeOffer] = []
    for draft in drafts:
        if not draft.label or draft.price is None or draft.price < 0:
            continue
        sizes.append(SizeOffer(size=draft.label, price=round(draft.price, 2), available=draft.available))
    return sizes


def default_size_ladder(labels: Sequence[str], price: float) -> List[SizeOffer]:
    return [SizeOffer(size=label, price=round(price, 2), available=True) for label in labels]


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def normalize_product(
    raw: Any,
    requested_identifier: str,
    *,
    config: Optional[NormalizerConfig] = None,
    endpoint: Optional[str] = None,
    upstream_sku: bool = False,
    captured_at: Optional[datetime] = None,
) -> Product:
    """
    Build a canonical Product from an upstream payload.

    Lenient policy (default) never raises for JSON input: missing prices fall
    back to config.default_price and missing sizes to config.default_sizes.
    With config.strict the same situations raise NoValidPrice / NoValidSizes.

    Args:
        raw: Parsed JSON from the upstream. Non-objects are treated as {}.
        requested_identifier: SKU or id the caller asked for.
        endpoint: Name of the candidate that produced the payload (diagnostics).
        upstream_sku: Prefer the payload's own `sku` (id lookups).
        captured_at: Capture time used when the payload has no timestamp.
    """
    config = config or NormalizerConfig()
    data: Dict[str, Any] = raw if isinstance(raw, dict) else {}
    identifier = clean_sku(requested_identifier)

    sku = identifier
    if upstream_sku:
        confirmed = _to_text(data.get("sku"))
        if confirmed:
            sku = clean_sku(confirmed)

    _, title = first_some(TITLE_EXTRACTORS, data)
    _, image = first_some(IMAGE_EXTRACTORS, data)
    _, last_updated = first_some(UPDATED_EXTRACTORS, data)
    if last_updated is None:
        last_updated = (captured_at or datetime.now(timezone.utc)).isoformat()

    price_source, regular_price = first_some(PRICE_EXTRACTORS, data)
    if regular_price is None:
        if config.strict:
            raise NoValidPrice(f"No valid price found for {identifier}", identifier=identifier)
        logger.info("No upstream price for %s, using default %.2f", identifier, config.default_price)
        regular_price = config.default_price
    else:
        logger.debug("Regular price for %s from %s: %s", identifier, price_source, regular_price)

    shape, drafts = extract_size_drafts(data, regular_price)
    sizes = _finalize_sizes(drafts)
    if not sizes:
        if config.strict:
            raise NoValidSizes(f"No valid sizes found for {identifier}", identifier=identifier)
        logger.info("No usable sizes for %s (shape=%s), using default ladder", identifier, shape)
        sizes = default_size_ladder(config.default_sizes, regular_price)

    return Product(
        sku=sku,
        title=title or f"Product {identifier}",
        image=image or config.placeholder_image,
        last_updated=last_updated,
        regular_price=round(regular_price, 2),
        sizes=sizes,
        source_tag=SourceTag.LIVE,
        meta=build_meta(sizes, endpoint=endpoint),
    )
