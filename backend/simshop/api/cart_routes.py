"""
Cart API Routes (stateless — the caller owns cart persistence)

POST /api/cart/summary  — priced lines and totals for a list of cart items
POST /api/cart/shipping — shipping quote for the cart's subtotal and weight
"""
import logging

from fastapi import APIRouter, Depends

from simshop.api.deps import domain_error, get_checkout_service, not_found
from simshop.models.order_models import CartRequest, CartShippingRequest
from simshop.models.pricing_models import CartSummary
from simshop.models.shipping_models import ShippingQuote
from simshop.services.checkout_service import CheckoutService
from simshop.services.errors import CatalogLookupError

router = APIRouter(prefix="/api/cart", tags=["Cart"])
logger = logging.getLogger("simshop-cart-routes")


@router.post("/summary", response_model=CartSummary, response_model_by_alias=True)
async def cart_summary(
    req: CartRequest,
    checkout: CheckoutService = Depends(get_checkout_service),
):
    try:
        result = checkout.summarize_cart(req.items)
    except CatalogLookupError as e:
        raise not_found(e)
    if not result.ok:
        logger.info("Cart summary rejected: %s", ", ".join(e.kind for e in result.errors))
        raise domain_error(result.errors, "Invalid cart configuration")
    return result.summary


@router.post("/shipping", response_model=ShippingQuote, response_model_by_alias=True)
async def cart_shipping(
    req: CartShippingRequest,
    checkout: CheckoutService = Depends(get_checkout_service),
):
    try:
        cart, shipping = checkout.quote_cart_shipping(req.postal_code, req.items)
    except CatalogLookupError as e:
        raise not_found(e)
    if not cart.ok:
        logger.info(
            "Cart shipping rejected for %s: %s", req.postal_code,
            ", ".join(e.kind for e in cart.errors), extra={"postal_code": req.postal_code},
        )
        raise domain_error(cart.errors, "Invalid cart configuration")
    if not shipping.ok:
        raise domain_error([shipping.error], shipping.error.message)
    return shipping.quote
