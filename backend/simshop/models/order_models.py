"""
Cart and order request contracts.

These models carry the structural half of order validation (required fields,
ranges, formats). Whether the referenced products exist and whether the prices
add up is decided afterwards by the checkout service and the engines, so that
those failures come back as domain errors instead of 422s.
"""
from typing import List, Optional

from pydantic import Field

from simshop.config import (
    DEFAULT_COUNTRY,
    MAX_CART_QUANTITY,
    MAX_ORDER_LINE_QUANTITY,
    MAX_ORDER_LINES,
    POSTAL_CODE_PATTERN,
)
from simshop.models.base import Money, ShopModel


# ── Cart ────────────────────────────────────────────────────────────────────

class CartItemRequest(ShopModel):
    product_id: str = Field(..., min_length=1)
    quantity: int = Field(1, gt=0, le=MAX_CART_QUANTITY)
    selected_option_ids: List[str] = Field(default_factory=list)


class CartRequest(ShopModel):
    items: List[CartItemRequest] = Field(default_factory=list)


class CartShippingRequest(CartRequest):
    postal_code: str = Field(..., pattern=POSTAL_CODE_PATTERN)


class PriceQuoteRequest(CartItemRequest):
    pass


# ── Orders ──────────────────────────────────────────────────────────────────

class ShippingAddress(ShopModel):
    shipping_street: str = Field(..., min_length=1)
    shipping_city: str = Field(..., min_length=1)
    shipping_state: Optional[str] = None
    shipping_postal_code: str = Field(..., pattern=POSTAL_CODE_PATTERN)
    shipping_country: str = Field(DEFAULT_COUNTRY, min_length=2, max_length=2)


class OrderItemSubmission(ShopModel):
    product_id: str = Field(..., min_length=1)
    product_name: str = Field(..., min_length=1)
    product_sku: str = Field(..., min_length=1)
    configuration_json: Optional[str] = None
    selected_option_ids: List[str] = Field(default_factory=list)
    quantity: int = Field(..., gt=0, le=MAX_ORDER_LINE_QUANTITY)
    unit_price: Money = Field(..., gt=0)        # with VAT
    unit_subtotal: Money = Field(..., gt=0)     # ex-VAT
    line_total: Money = Field(..., gt=0)        # with VAT
    line_subtotal: Money = Field(..., gt=0)     # ex-VAT


class OrderSubmission(ShippingAddress):
    subtotal: Money = Field(..., gt=0)
    vat_amount: Money = Field(..., ge=0)
    shipping_cost: Money = Field(..., ge=0)
    total_amount: Money = Field(..., gt=0)
    notes: Optional[str] = None
    order_items: List[OrderItemSubmission] = Field(..., min_length=1, max_length=MAX_ORDER_LINES)


class OrderDraftRequest(CartRequest, ShippingAddress):
    items: List[CartItemRequest] = Field(..., min_length=1, max_length=MAX_ORDER_LINES)
    notes: Optional[str] = None


class OrderValidationResponse(ShopModel):
    valid: bool
    subtotal: Money
    vat_amount: Money
    shipping_cost: Money
    total_amount: Money
    estimated_production_days: Optional[int] = None
