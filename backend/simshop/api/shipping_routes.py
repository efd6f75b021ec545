"""
Shipping API Routes

POST /api/shipping/calculate           — shipping quote for postal code, subtotal, weight
GET  /api/shipping/zones               — active zones (public rate table)
GET  /api/shipping/zone/{postal_code}  — zone serving a postal code
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from simshop.api.deps import domain_error, get_zone_store
from simshop.models.shipping_models import CalculateShippingRequest, ShippingQuote, ShippingZoneSummary
from simshop.services.catalog_store import ShippingZoneStore
from simshop.services.shipping_engine import ShippingCostEngine

router = APIRouter(prefix="/api/shipping", tags=["Shipping"])
logger = logging.getLogger("simshop-shipping-routes")

_engine = ShippingCostEngine()


@router.post("/calculate", response_model=ShippingQuote, response_model_by_alias=True)
async def calculate_shipping(
    req: CalculateShippingRequest,
    zones: ShippingZoneStore = Depends(get_zone_store),
):
    logger.info(
        "Calculating shipping for postal code %s, subtotal %s, weight %skg",
        req.postal_code, req.subtotal, req.weight_kg,
        extra={"postal_code": req.postal_code},
    )
    result = _engine.quote_shipping(req.postal_code, req.subtotal, req.weight_kg, zones.all())
    if not result.ok:
        raise domain_error([result.error], result.error.message)
    return result.quote


@router.get("/zones", response_model=List[ShippingZoneSummary], response_model_by_alias=True)
async def list_zones(zones: ShippingZoneStore = Depends(get_zone_store)):
    return [_engine.summarize(z) for z in _engine.active_zones(zones.all())]


@router.get("/zone/{postal_code}", response_model=ShippingZoneSummary, response_model_by_alias=True)
async def zone_for_postal_code(postal_code: str, zones: ShippingZoneStore = Depends(get_zone_store)):
    zone = _engine.resolve_zone(postal_code, zones.all())
    if zone is None:
        raise HTTPException(
            status_code=404,
            detail={"message": f"No shipping zone found for postal code {postal_code}"},
        )
    return _engine.summarize(zone)
