"""
Order Placement API Routes

POST /api/orders/draft    — server-computed order for a cart and delivery address
POST /api/orders/validate — accept/reject a client-submitted order before it is persisted
"""
import logging

from fastapi import APIRouter, Depends

from simshop.api.deps import domain_error, get_checkout_service, not_found
from simshop.models.order_models import OrderDraftRequest, OrderSubmission, OrderValidationResponse
from simshop.services.checkout_service import CheckoutService
from simshop.services.errors import CatalogLookupError

router = APIRouter(prefix="/api/orders", tags=["Orders"])
logger = logging.getLogger("simshop-order-routes")


@router.post("/draft")
async def order_draft(
    req: OrderDraftRequest,
    checkout: CheckoutService = Depends(get_checkout_service),
):
    try:
        result = checkout.build_order_draft(req.items, req, notes=req.notes)
    except CatalogLookupError as e:
        raise not_found(e)
    if not result.ok:
        logger.info(
            "Order draft rejected for %s: %s", req.shipping_postal_code,
            ", ".join(e.kind for e in result.errors), extra={"postal_code": req.shipping_postal_code},
        )
        raise domain_error(result.errors, "Order could not be priced")
    return {
        "order": result.order.to_wire(),
        "estimatedProductionDays": result.estimated_production_days,
    }


@router.post("/validate", response_model=OrderValidationResponse, response_model_by_alias=True)
async def validate_order(
    order: OrderSubmission,
    checkout: CheckoutService = Depends(get_checkout_service),
):
    try:
        result = checkout.validate_order(order)
    except CatalogLookupError as e:
        raise not_found(e)
    if not result.ok:
        logger.info(
            "Order validation rejected for %s: %s", order.shipping_postal_code,
            ", ".join(e.kind for e in result.errors), extra={"postal_code": order.shipping_postal_code},
        )
        raise domain_error(result.errors, "; ".join(e.message for e in result.errors))
    return OrderValidationResponse(
        valid=True,
        subtotal=order.subtotal,
        vat_amount=order.vat_amount,
        shipping_cost=order.shipping_cost,
        total_amount=order.total_amount,
        estimated_production_days=result.estimated_production_days,
    )
