"""
FastAPI application - Main entry point
"""

from dotenv import load_dotenv

load_dotenv()

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.database.product_cache import ProductCache
from src.error_handler import ErrorHandler
from src.fallback_handler import FallbackHandler
from src.integrations.clients.mocks.local_product_catalogues import LocalProductCatalogue
from src.integrations.clients.real_http.kicks_catalogue import KicksCatalogueClient
from src.integrations.policy.catalog_service import CatalogService
from src.utils.config_loader import CatalogConfig, get_api_key, load_catalog_config

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Courts Sneaker Catalog API",
    description="Normalized sneaker product and pricing data for the storefront",
    version="1.0.0",
)


# CORS: every response is public. Preflight is answered by the product routes
# themselves (empty body), so CORSMiddleware is not used.
@app.middleware("http")
async def add_cors_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.setdefault("Access-Control-Allow-Origin", "*")
    return response


BASE_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Cache-Control": "no-store",
}
PREFLIGHT_HEADERS = {
    **BASE_HEADERS,
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
}

# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================

catalog_cfg: CatalogConfig = load_catalog_config()


def build_catalog_service(cfg: CatalogConfig, api_key: Optional[str] = None, transport=None) -> CatalogService:
    """Wire resolver, cache and fallback from config. The one place clients are chosen."""
    resolver = KicksCatalogueClient(
        api_key=get_api_key(cfg) if api_key is None else api_key,
        candidates=cfg.upstream.candidates,
        timeout_seconds=cfg.upstream.timeout_seconds,
        user_agent=cfg.upstream.user_agent,
        transport=transport,
    )
    return CatalogService(
        resolver=resolver,
        cache=ProductCache(ttl_seconds=cfg.cache.ttl_seconds),
        fallback_handler=FallbackHandler(LocalProductCatalogue(cfg.fallback)),
        normalizer_config=cfg.normalizer,
        featured=cfg.featured,
    )


catalog_service = build_catalog_service(catalog_cfg)
error_handler = ErrorHandler()


def get_catalog_service() -> CatalogService:
    return catalog_service


def _json(status_code: int, body: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body, headers=BASE_HEADERS)


# ============================================================================
# ROUTES
# ============================================================================

products_router = APIRouter()

# Anything but GET/OPTIONS is answered with a JSON 405 by the handler itself.
PRODUCT_METHODS = ["GET", "OPTIONS", "HEAD", "POST", "PUT", "PATCH", "DELETE"]


@app.exception_handler(StarletteHTTPException)
async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
    """Unrouted methods (e.g. TRACE) get the same 405 body as routed ones."""
    if exc.status_code == 405:
        return _json(405, {"error": "Method not allowed"})
    return await http_exception_handler(request, exc)


@products_router.api_route("/api/products", methods=PRODUCT_METHODS, tags=["Products"])
@products_router.api_route(
    "/.netlify/functions/kicksdb",
    methods=PRODUCT_METHODS,
    include_in_schema=False,
)
async def get_product(request: Request, service: CatalogService = Depends(get_catalog_service)):
    """Single product by ?sku= or ?id= (id wins), optional ?market= (default US)."""
    if request.method == "OPTIONS":
        return Response(status_code=200, content=b"", headers=PREFLIGHT_HEADERS, media_type="application/json")
    if request.method != "GET":
        return _json(405, {"error": "Method not allowed"})

    params = request.query_params
    try:
        product = await service.get_product(
            sku=params.get("sku"),
            product_id=params.get("id"),
            market=params.get("market") or "US",
        )
    except Exception as e:
        status_code, body = error_handler.handle_exception(e, context={"path": request.url.path, "query": dict(params)})
        return _json(status_code, body)

    return _json(200, product.to_public_dict())


@products_router.get("/api/catalog", tags=["Products"])
async def get_catalog(market: str = "US", service: CatalogService = Depends(get_catalog_service)):
    """Featured products for the storefront grid, fetched concurrently."""
    try:
        products = await service.get_featured(market=market)
    except Exception as e:
        status_code, body = error_handler.handle_exception(e, context={"path": "/api/catalog", "market": market})
        return _json(status_code, body)
    return _json(200, {"market": market, "products": [p.to_public_dict() for p in products]})


app.include_router(products_router)


@app.get("/", tags=["Health"])
async def root():
    return {"name": app.title, "version": app.version, "status": "running", "docs": "/docs"}


@app.get("/health", tags=["Health"])
async def health_check(service: CatalogService = Depends(get_catalog_service)) -> Dict[str, Any]:
    return {
        "status": "healthy" if service.resolver.api_key else "degraded",
        "cache": {"entries": len(service.cache), "ttlSeconds": service.cache.ttl_seconds},
        "timestamp": datetime.now().isoformat(),
    }


# ============================================================================
# STARTUP/SHUTDOWN EVENTS
# ============================================================================
_sweeper_task: Optional[asyncio.Task] = None


@app.on_event("startup")
async def startup_event():
    """Initialize on startup"""
    global _sweeper_task
    logger.info("Starting Courts Sneaker Catalog API...")
    if not catalog_service.resolver.api_key:
        logger.error("%s environment variable not set; product requests will fail", catalog_cfg.upstream.api_key_env)
    logger.info(
        "Cache TTL %.0fs, sweep every %.0fs, %d upstream candidates",
        catalog_cfg.cache.ttl_seconds,
        catalog_cfg.cache.sweep_interval_seconds,
        len(catalog_cfg.upstream.candidates),
    )
    _sweeper_task = asyncio.create_task(catalog_service.cache.run_sweeper(catalog_cfg.cache.sweep_interval_seconds))


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down Courts Sneaker Catalog API...")
    if _sweeper_task is not None:
        _sweeper_task.cancel()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("src.api.main:app", host="0.0.0.0", port=8000)
