"""
CheckoutService — cart, shipping and order-placement flows over the engines.

The service does the existence lookup against the catalog snapshot (unknown
or inactive products raise CatalogLookupError), hands pre-validated entities
to the pricing and shipping engines, and aggregates their outputs. Domain
errors from the engines are passed through as values.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from simshop.models.order_models import (
    CartItemRequest,
    OrderItemSubmission,
    OrderSubmission,
    ShippingAddress,
)
from simshop.models.pricing_models import CartLine, CartSummary, LineQuote, PricedLine
from simshop.services.catalog_store import CatalogStore, ShippingZoneStore
from simshop.services.errors import DomainError, OrderNotPlaceable
from simshop.services.money import ZERO, line_amount, round2, to_decimal
from simshop.services.order_reconciliation import OrderReconciler, per_line_vat
from simshop.services.pricing_engine import ConfigurationPricingEngine, PricingResult
from simshop.services.shipping_engine import ShippingCostEngine, ShippingResult

logger = logging.getLogger("simshop-checkout")


@dataclass(frozen=True)
class CartResult:
    summary: Optional[CartSummary] = None
    priced_lines: Tuple[PricedLine, ...] = ()
    errors: Tuple[DomainError, ...] = ()

    @property
    def ok(self) -> bool:
        return self.summary is not None and not self.errors


@dataclass(frozen=True)
class OrderDraftResult:
    order: Optional[OrderSubmission] = None
    estimated_production_days: Optional[int] = None
    errors: Tuple[DomainError, ...] = ()

    @property
    def ok(self) -> bool:
        return self.order is not None and not self.errors


@dataclass(frozen=True)
class OrderValidationResult:
    errors: Tuple[DomainError, ...] = ()
    estimated_production_days: Optional[int] = None

    @property
    def ok(self) -> bool:
        return not self.errors


class CheckoutService:

    def __init__(
        self,
        catalog: CatalogStore,
        zones: ShippingZoneStore,
        pricing_engine: Optional[ConfigurationPricingEngine] = None,
        shipping_engine: Optional[ShippingCostEngine] = None,
        reconciler: Optional[OrderReconciler] = None,
    ) -> None:
        self.catalog = catalog
        self.zones = zones
        self.pricing = pricing_engine or ConfigurationPricingEngine()
        self.shipping = shipping_engine or ShippingCostEngine()
        self.reconciler = reconciler or OrderReconciler()

    # ------------------------------------------------------------------
    # Pricing
    # ------------------------------------------------------------------

    def price_item(self, product_id: str, selected_option_ids: Sequence[str]) -> PricingResult:
        product = self.catalog.require_product(product_id)
        return self.pricing.price_selection(
            product, self.catalog.options_for(product_id), selected_option_ids
        )

    def quote_line(self, product_id: str, quantity: int, selected_option_ids: Sequence[str]):
        """PricingResult plus, when valid, the LineQuote with the four order-line amounts."""
        result = self.price_item(product_id, selected_option_ids)
        if not result.ok:
            return result, None
        line = result.line
        unit_subtotal = round2(line.unit_price_ex_vat)
        return result, LineQuote(
            line=line,
            quantity=quantity,
            unit_price=line.unit_price_with_vat,
            unit_subtotal=unit_subtotal,
            line_total=line_amount(line.unit_price_with_vat, quantity),
            line_subtotal=line_amount(unit_subtotal, quantity),
            configuration_json=line.configuration_json(),
        )

    # ------------------------------------------------------------------
    # Cart
    # ------------------------------------------------------------------

    def summarize_cart(self, items: Sequence[CartItemRequest]) -> CartResult:
        """
        Price every cart item and total the cart.

        VAT is summed per line at each product's own rate and rounded once:
            vat = round2(sum(line_subtotal * vat_rate / 100))
        """
        errors: List[DomainError] = []
        lines: List[CartLine] = []
        priced_lines: List[PricedLine] = []
        weight_grams = 0

        for item in items:
            result = self.price_item(item.product_id, item.selected_option_ids)
            if not result.ok:
                errors.extend(result.errors)
                continue
            priced = result.line
            unit = round2(priced.unit_price_ex_vat)
            priced_lines.append(priced)
            lines.append(CartLine(
                product_id=priced.product_id,
                sku=priced.sku,
                name=priced.product_name,
                quantity=item.quantity,
                unit_price=unit,
                vat_rate=priced.vat_rate,
                subtotal=line_amount(unit, item.quantity),
                configuration_json=priced.configuration_json(),
                selected_option_ids=priced.selected_option_ids,
            ))
            weight_grams += (priced.weight_grams or 0) * item.quantity

        if errors:
            return CartResult(errors=tuple(errors))

        subtotal = sum((to_decimal(l.subtotal) for l in lines), ZERO)
        vat = per_line_vat([(to_decimal(l.subtotal), to_decimal(l.vat_rate)) for l in lines])
        summary = CartSummary(
            items=lines,
            total_items=sum(l.quantity for l in lines),
            subtotal=subtotal,
            vat_amount=vat,
            total=round2(subtotal + vat),
            total_weight_kg=Decimal(weight_grams) / Decimal(1000),
            estimated_production_days=max((p.base_production_days for p in priced_lines), default=None),
        )
        return CartResult(summary=summary, priced_lines=tuple(priced_lines))

    def quote_cart_shipping(self, postal_code: str, items: Sequence[CartItemRequest]):
        """(CartResult, ShippingResult or None) — shipping is only quoted for a valid cart."""
        cart = self.summarize_cart(items)
        if not cart.ok:
            return cart, None
        shipping = self.shipping.quote_shipping(
            postal_code, cart.summary.subtotal, cart.summary.total_weight_kg, self.zones.all()
        )
        return cart, shipping

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def build_order_draft(
        self,
        items: Sequence[CartItemRequest],
        address: ShippingAddress,
        notes: Optional[str] = None,
    ) -> OrderDraftResult:
        """Server-computed order whose amounts reconcile by construction."""
        cart, shipping = self.quote_cart_shipping(address.shipping_postal_code, items)
        if not cart.ok:
            return OrderDraftResult(errors=cart.errors)
        unplaceable = self._unplaceable(cart.summary)
        if unplaceable:
            return OrderDraftResult(errors=tuple(unplaceable))
        if not shipping.ok:
            return OrderDraftResult(errors=(shipping.error,))

        summary = cart.summary
        order_items: List[OrderItemSubmission] = []
        for cart_line, priced in zip(summary.items, cart.priced_lines):
            order_items.append(OrderItemSubmission(
                product_id=priced.product_id,
                product_name=priced.product_name or priced.sku,
                product_sku=priced.sku,
                configuration_json=cart_line.configuration_json,
                selected_option_ids=cart_line.selected_option_ids,
                quantity=cart_line.quantity,
                unit_price=priced.unit_price_with_vat,
                unit_subtotal=cart_line.unit_price,
                line_total=line_amount(priced.unit_price_with_vat, cart_line.quantity),
                line_subtotal=cart_line.subtotal,
            ))

        shipping_cost = shipping.quote.total_cost
        order = OrderSubmission(
            **address.model_dump(include=set(ShippingAddress.model_fields)),
            subtotal=summary.subtotal,
            vat_amount=summary.vat_amount,
            shipping_cost=shipping_cost,
            total_amount=round2(summary.subtotal + summary.vat_amount + shipping_cost),
            notes=notes,
            order_items=order_items,
        )
        return OrderDraftResult(order=order, estimated_production_days=summary.estimated_production_days)

    @staticmethod
    def _unplaceable(summary: CartSummary) -> List[DomainError]:
        # An order needs at least one line and positive amounts on every line
        if not summary.items:
            return [OrderNotPlaceable(reason="the cart is empty")]
        return [
            OrderNotPlaceable(reason=f"'{line.sku}' has no price")
            for line in summary.items
            if line.unit_price <= ZERO
        ]

    def validate_order(self, order: OrderSubmission) -> OrderValidationResult:
        """
        Full placement check of a client-submitted order.

        Order of checks:
          1. price every line with the engine (selection errors stop here)
          2. additive reconciliation of the submitted amounts
          3. submitted line prices vs the engine's priced lines
          4. VAT vs per-line VAT
          5. shipping zone lookup and shipping cost
        Every failure is collected; any failure rejects the order.
        """
        logger.info("Validating order for %s (%d lines)", order.shipping_postal_code,
                    len(order.order_items), extra={"postal_code": order.shipping_postal_code})

        errors: List[DomainError] = []
        priced_lines: List[PricedLine] = []
        for item in order.order_items:
            result = self.price_item(item.product_id, item.selected_option_ids)
            if result.ok:
                priced_lines.append(result.line)
            else:
                errors.extend(result.errors)
        if errors:
            return OrderValidationResult(errors=tuple(errors))

        errors.extend(self.reconciler.reconcile(order).errors)
        errors.extend(self.reconciler.verify_priced_lines(order, priced_lines).errors)
        errors.extend(self.reconciler.verify_vat(order, priced_lines).errors)

        weight_grams = sum((p.weight_grams or 0) * i.quantity for p, i in zip(priced_lines, order.order_items))
        subtotal = sum((line_amount(round2(p.unit_price_ex_vat), i.quantity)
                        for p, i in zip(priced_lines, order.order_items)), ZERO)
        shipping: ShippingResult = self.shipping.quote_shipping(
            order.shipping_postal_code, subtotal, Decimal(weight_grams) / Decimal(1000), self.zones.all()
        )
        if shipping.ok:
            errors.extend(self.reconciler.verify_shipping(order, shipping.quote).errors)
        else:
            errors.append(shipping.error)

        if errors:
            logger.warning("Order rejected: %s", "; ".join(e.message for e in errors))
        production_days = max((p.base_production_days for p in priced_lines), default=None)
        return OrderValidationResult(errors=tuple(errors), estimated_production_days=production_days)
