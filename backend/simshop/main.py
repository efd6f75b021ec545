"""
Sim-racing shop pricing & shipping API.
FastAPI surface over the configuration pricing engine, the shipping cost engine
and order reconciliation. Catalog and zone snapshots are loaded at startup.
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from simshop import config
from simshop.services.catalog_store import CatalogStore, ShippingZoneStore
from simshop.services.checkout_service import CheckoutService
from simshop.services.logging_config import setup_logging
from simshop.services.middleware import RequestTimingMiddleware

setup_logging(level=config.LOG_LEVEL, json_output=config.LOG_JSON)
logger = logging.getLogger("simshop-api")


# ---------------------------------------------------------------------------
# Security Headers Middleware
# ---------------------------------------------------------------------------
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds standard security headers to every response."""
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


def load_snapshots() -> tuple[CatalogStore, ShippingZoneStore]:
    if config.CATALOG_FILE:
        catalog = CatalogStore.from_file(config.CATALOG_FILE)
    else:
        logger.warning("SIMSHOP_CATALOG_FILE not set — starting with an empty catalog")
        catalog = CatalogStore()

    if config.SHIPPING_ZONES_FILE:
        zones = ShippingZoneStore.from_file(config.SHIPPING_ZONES_FILE)
    else:
        logger.info("SIMSHOP_SHIPPING_ZONES_FILE not set — using default zones")
        zones = ShippingZoneStore.default()
    return catalog, zones


def create_app(
    catalog: Optional[CatalogStore] = None,
    zones: Optional[ShippingZoneStore] = None,
) -> FastAPI:
    if catalog is None or zones is None:
        loaded_catalog, loaded_zones = load_snapshots()
        catalog = loaded_catalog if catalog is None else catalog
        zones = loaded_zones if zones is None else zones

    app = FastAPI(
        title="Sim Racing Shop Pricing API",
        version=config.API_VERSION,
        description="Configurator pricing, shipping quotes and order reconciliation",
    )
    app.state.checkout = CheckoutService(catalog, zones)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "X-Request-ID"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    # Request timing + X-Request-ID must be outermost so it wraps all other middleware
    app.add_middleware(RequestTimingMiddleware)

    from simshop.api.shipping_routes import router as shipping_router
    from simshop.api.pricing_routes import router as pricing_router
    from simshop.api.cart_routes import router as cart_router
    from simshop.api.order_routes import router as order_router

    app.include_router(shipping_router)
    app.include_router(pricing_router)
    app.include_router(cart_router)
    app.include_router(order_router)

    @app.get("/health")
    async def health_check():
        return {
            "status": "active",
            "version": config.API_VERSION,
            "products": len(catalog),
            "shipping_zones": len(zones.all()),
        }

    logger.info("API ready: %d products, %d shipping zones", len(catalog), len(zones.all()))
    return app


app = create_app()
