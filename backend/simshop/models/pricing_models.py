"""
Pricing snapshots produced by the configuration pricing engine and the cart
summary built from them. Cart and order lines persist these as opaque
snapshots; they are never re-resolved against the live catalog.
"""
import json
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from simshop.models.base import Money, ShopModel, SnapshotModel


class ResolvedOption(SnapshotModel):
    group_name: str
    component_id: str
    component_name: str
    option_id: str
    price_modifier: Money


class PricedLine(SnapshotModel):
    product_id: str
    sku: str
    product_name: str = ""
    unit_price_ex_vat: Money
    unit_price_with_vat: Money
    vat_rate: Money
    selections: List[ResolvedOption] = Field(default_factory=list)
    base_production_days: int = 0
    weight_grams: Optional[int] = None

    @property
    def selected_option_ids(self) -> List[str]:
        return [s.option_id for s in self.selections]

    def configuration_json(self) -> Optional[str]:
        """Name/value snapshot stored on cart and order lines (None when uncustomized)."""
        if not self.selections:
            return None
        return json.dumps(
            [
                {
                    "group": s.group_name,
                    "componentId": s.component_id,
                    "componentName": s.component_name,
                }
                for s in self.selections
            ],
            ensure_ascii=False,
        )


class OptionGroupView(SnapshotModel):
    """Configurator display model for one option group."""
    name: str
    is_required: bool
    default_option_id: Optional[str] = None
    options: List[ResolvedOption] = Field(default_factory=list)


class CartLine(SnapshotModel):
    product_id: str
    sku: str
    name: str
    quantity: int
    unit_price: Money          # ex-VAT, matches the storefront CartItemDto
    vat_rate: Money
    subtotal: Money            # round2(unit_price * quantity)
    configuration_json: Optional[str] = None
    selected_option_ids: List[str] = Field(default_factory=list)


class CartSummary(SnapshotModel):
    items: List[CartLine] = Field(default_factory=list)
    total_items: int = 0
    subtotal: Money = Decimal("0")
    vat_amount: Money = Decimal("0")
    total: Money = Decimal("0")
    total_weight_kg: Money = Decimal("0")
    estimated_production_days: Optional[int] = None


class LineQuote(ShopModel):
    """POST /api/pricing/quote response: the priced unit plus its quantity multiples."""
    line: PricedLine
    quantity: int
    unit_price: Money
    unit_subtotal: Money
    line_total: Money
    line_subtotal: Money
    configuration_json: Optional[str] = None
