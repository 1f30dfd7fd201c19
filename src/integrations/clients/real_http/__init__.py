"""
Real HTTP integration clients.

These clients communicate with the third-party sneaker catalogue via HTTP:
- KicksDB / kicks.dev product and search endpoints

Important:
- Must return payloads that policy/product_normalizer.py turns into the
  Product contract in src/integrations/contracts/catalog.py
- When every endpoint fails, the caller switches to clients/mocks/* data

Switching:
The wiring of real vs local clients happens in src/api/main.py only.
"""

from .kicks_catalogue import KicksCatalogueClient, select_best_match

__all__ = ["KicksCatalogueClient", "select_best_match"]
