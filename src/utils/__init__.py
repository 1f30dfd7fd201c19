"""
Utility modules for the catalog gateway
"""
from .config_loader import CatalogConfig, get_api_key, load_catalog_config

__all__ = [
    'CatalogConfig',
    'get_api_key',
    'load_catalog_config',
]
