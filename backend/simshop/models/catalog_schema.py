from decimal import Decimal
from typing import Optional

from pydantic import Field

from simshop.config import DEFAULT_PRODUCTION_DAYS, DEFAULT_VAT_RATE
from simshop.models.base import Money, SnapshotModel


class Product(SnapshotModel):
    """
    Sellable item as supplied by the catalog collaborator.
    Names arrive already localized; base price is ex-VAT.
    """
    id: str = Field(..., description="Product identifier")
    sku: str = Field(..., description="e.g., WHL-GT3-PRO")
    name: str = Field("", description="Localized display name")
    base_price: Money = Field(..., description="Ex-VAT unit price before options")
    vat_rate: Money = Field(DEFAULT_VAT_RATE, description="Percentage, e.g. 21.00")
    is_customizable: bool = True
    is_active: bool = True
    base_production_days: int = Field(DEFAULT_PRODUCTION_DAYS, ge=0)
    weight_grams: Optional[int] = Field(None, ge=0)


class ComponentOption(SnapshotModel):
    """
    One selectable choice inside a named option group of a product.
    ``is_group_required`` describes the group: if any option in the group
    carries it, the group needs exactly one selection.
    """
    id: str
    product_id: str
    option_group: str = Field(..., description="e.g., Rim, Pedal set")
    is_group_required: bool = False
    price_modifier: Money = Field(Decimal("0"), description="Ex-VAT delta added to base price")
    component_id: str
    component_name: str = ""
    is_default: bool = False
    display_order: int = 0
    in_stock: bool = True


class ShippingZone(SnapshotModel):
    """Named rate-table entry keyed by comma-separated postal code prefixes."""
    name: str = Field(..., description="e.g., Península, Baleares, Canarias")
    postal_code_prefixes: str = Field(..., description='e.g., "07" or "35,38"')
    base_cost: Money
    cost_per_kg: Money
    free_shipping_threshold: Money
    is_active: bool = True

    def prefixes(self) -> list[str]:
        return [p.strip() for p in self.postal_code_prefixes.split(",") if p.strip()]
