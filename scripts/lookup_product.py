#!/usr/bin/env python3
"""
Look up products through the catalog gateway without starting the API:
- resolve one SKU or upstream id and print the normalized Product JSON
- or print the whole featured catalog (--featured)

Uses config/catalog_config.yml and KICKSDB_API_KEY from the environment / .env.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

load_dotenv()

from src.error_handler import CatalogError
from src.utils.config_loader import load_catalog_config


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


async def run(args: argparse.Namespace) -> int:
    from src.api.main import build_catalog_service

    cfg = load_catalog_config(Path(args.config) if args.config else None)
    service = build_catalog_service(cfg)

    if args.featured:
        products = await service.get_featured(market=args.market)
        print(json.dumps([p.to_public_dict() for p in products], indent=2, ensure_ascii=False))
        return 0

    product = await service.get_product(sku=args.sku, product_id=args.id, market=args.market)
    print(json.dumps(product.to_public_dict(), indent=2, ensure_ascii=False))
    if product.is_fallback:
        print("\n(Upstream unavailable: fallback data shown.)", file=sys.stderr)
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Resolve sneaker products through the catalog gateway")
    parser.add_argument("--sku", help="Compound SKU, e.g. '112441113-13/1124D1113-13'")
    parser.add_argument("--id", help="Upstream product id (takes priority over --sku)")
    parser.add_argument("--market", default="US", help="Market code (default: US)")
    parser.add_argument("--featured", action="store_true", help="Resolve every featured product")
    parser.add_argument("--config", help="Path to catalog_config.yml")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    setup_logging(args.verbose)
    if not args.featured and not (args.sku or args.id):
        parser.error("one of --sku, --id or --featured is required")

    try:
        return asyncio.run(run(args))
    except CatalogError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
