"""
Configuration loader for the catalog gateway
"""

import os
import yaml
from pathlib import Path
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, ValidationError
import logging

from src.integrations.contracts.upstream import (
    AuthStyle,
    EndpointCandidate,
    LookupKind,
    ShapeHint,
)

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE = "https://images.unsplash.com/photo-1542291026-7eec264c27ff?w=500&h=500&fit=crop"

DEFAULT_CANDIDATES: List[EndpointCandidate] = [
    EndpointCandidate(
        name="stockx-product",
        url_template="https://api.kicks.dev/v3/stockx/products/{identifier}",
        lookup=LookupKind.ID,
    ),
    EndpointCandidate(
        name="stockx-search",
        url_template="https://api.kicks.dev/v3/stockx/products",
        shape_hint=ShapeHint.SEARCH_RESULTS,
        params={"query": "{identifier}", "limit": "5"},
    ),
    EndpointCandidate(
        name="kicksdb-v1",
        url_template="https://api.kicksdb.com/v1/product/{identifier}",
        auth_style=AuthStyle.MULTI_HEADER,
    ),
    EndpointCandidate(
        name="kicksdb",
        url_template="https://api.kicksdb.com/product/{identifier}",
        auth_style=AuthStyle.MULTI_HEADER,
    ),
]


class CacheConfig(BaseModel):
    """Result cache configuration"""

    ttl_seconds: float = Field(default=600.0, gt=0)
    sweep_interval_seconds: float = Field(default=600.0, gt=0)


class UpstreamConfig(BaseModel):
    """Upstream catalogue API configuration"""

    api_key_env: str = "KICKSDB_API_KEY"
    timeout_seconds: float = Field(default=5.0, gt=0, le=60)
    user_agent: str = "Courts-StockX-App/1.0"
    candidates: List[EndpointCandidate] = Field(default_factory=lambda: list(DEFAULT_CANDIDATES))


class NormalizerConfig(BaseModel):
    """Normalization policy. strict=True raises instead of falling back."""

    strict: bool = False
    default_price: float = Field(default=120.0, gt=0)
    placeholder_image: str = PLACEHOLDER_IMAGE
    default_sizes: List[str] = Field(
        default_factory=lambda: ["US 7", "US 8", "US 8.5", "US 9", "US 9.5", "US 10", "US 10.5", "US 11", "US 12"]
    )


class FallbackProduct(BaseModel):
    name: str
    price: float = Field(gt=0)
    image: str = PLACEHOLDER_IMAGE


class FallbackConfig(BaseModel):
    """Synthesized product data served when the upstream is unavailable"""

    seed: int = 0
    base_price: float = Field(default=120.0, gt=0)
    placeholder_image: str = PLACEHOLDER_IMAGE
    availability_rate: float = Field(default=0.6, ge=0.0, le=1.0)
    price_spread: float = Field(default=20.0, ge=0.0)
    size_range: List[str] = Field(
        default_factory=lambda: [
            "6.5", "7", "7.5", "8", "8.5", "9", "9.5", "10", "10.5",
            "11", "11.5", "12", "12.5", "13", "13.5", "14", "15",
        ]
    )
    products: Dict[str, FallbackProduct] = Field(default_factory=dict)


class FeaturedProduct(BaseModel):
    name: str
    sku: str


class CatalogConfig(BaseModel):
    """Complete gateway configuration"""

    cache: CacheConfig = Field(default_factory=CacheConfig)
    upstream: UpstreamConfig = Field(default_factory=UpstreamConfig)
    normalizer: NormalizerConfig = Field(default_factory=NormalizerConfig)
    fallback: FallbackConfig = Field(default_factory=FallbackConfig)
    featured: List[FeaturedProduct] = Field(default_factory=list)


def load_catalog_config(config_path: Optional[Path] = None) -> CatalogConfig:
    """
    Load and validate gateway configuration from YAML file

    Args:
        config_path: Path to config file. Defaults to config/catalog_config.yml

    Returns:
        Validated CatalogConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValidationError: If config doesn't match schema
    """
    if config_path is None:
        config_path = Path(__file__).parent.parent.parent / "config" / "catalog_config.yml"

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_data = yaml.safe_load(f) or {}

    try:
        config = CatalogConfig(**config_data)
        logger.info("Successfully loaded catalog config from %s", config_path)
        return config
    except ValidationError as e:
        logger.error("Catalog config validation failed: %s", e)
        raise


def get_api_key(config: CatalogConfig) -> str:
    """Read the upstream credential from the environment variable named in config."""
    return os.getenv(config.upstream.api_key_env, "").strip()
