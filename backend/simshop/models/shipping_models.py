from decimal import Decimal
from typing import Optional

from pydantic import Field

from simshop.config import MAX_SHIPPING_WEIGHT_KG, POSTAL_CODE_PATTERN
from simshop.models.base import Money, ShopModel, SnapshotModel


class ShippingQuote(SnapshotModel):
    """Recomputed whenever destination or cart contents change."""
    zone_name: str
    base_cost: Money
    weight_cost: Money
    total_cost: Money
    weight_kg: Money
    is_free_shipping: bool
    free_shipping_threshold: Money
    subtotal_needed_for_free_shipping: Money


class CalculateShippingRequest(ShopModel):
    postal_code: str = Field(..., pattern=POSTAL_CODE_PATTERN)
    subtotal: Money = Field(..., ge=0)
    weight_kg: Money = Field(Decimal("0"), ge=0, le=MAX_SHIPPING_WEIGHT_KG)


class ShippingZoneSummary(ShopModel):
    """Public view of a zone (prefix list is not exposed)."""
    name: str
    base_cost: Money
    cost_per_kg: Money
    free_shipping_threshold: Optional[Money] = None
