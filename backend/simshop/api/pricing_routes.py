"""
Configurator Pricing API Routes

GET  /api/pricing/products/{product_id}/options — option groups + default pre-selection
POST /api/pricing/quote                         — price one configured product line
"""
import logging

from fastapi import APIRouter, Depends

from simshop.api.deps import domain_error, get_checkout_service, not_found
from simshop.models.order_models import PriceQuoteRequest
from simshop.models.pricing_models import LineQuote
from simshop.services.checkout_service import CheckoutService
from simshop.services.errors import CatalogLookupError

router = APIRouter(prefix="/api/pricing", tags=["Pricing"])
logger = logging.getLogger("simshop-pricing-routes")


@router.get("/products/{product_id}/options")
async def product_options(
    product_id: str,
    checkout: CheckoutService = Depends(get_checkout_service),
):
    try:
        product = checkout.catalog.require_product(product_id)
    except CatalogLookupError as e:
        raise not_found(e)
    options = checkout.catalog.options_for(product_id) if product.is_customizable else []
    groups = checkout.pricing.group_options(options)
    return {
        "productId": product.id,
        "isCustomizable": product.is_customizable,
        "groups": [g.to_wire() for g in groups],
        "defaultSelection": checkout.pricing.default_selection(options),
    }


@router.post("/quote", response_model=LineQuote, response_model_by_alias=True)
async def quote_line(
    req: PriceQuoteRequest,
    checkout: CheckoutService = Depends(get_checkout_service),
):
    try:
        result, quote = checkout.quote_line(req.product_id, req.quantity, req.selected_option_ids)
    except CatalogLookupError as e:
        raise not_found(e)
    if quote is None:
        logger.info(
            "Quote rejected for %s: %s", req.product_id,
            ", ".join(e.kind for e in result.errors), extra={"product_id": req.product_id},
        )
        raise domain_error(result.errors, "Invalid product configuration")
    return quote
