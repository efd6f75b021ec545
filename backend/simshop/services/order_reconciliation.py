"""
OrderReconciler — consistency checks run before an order is accepted.

Covers:
  - Additive reconciliation of a submitted order
      * per line: lineTotal = unitPrice x qty, lineSubtotal = unitSubtotal x qty
      * order: subtotal = sum(lineSubtotal), total = subtotal + VAT + shipping
  - Line SKU and prices against the server's own PricedLine for each item
  - VAT amount against per-line VAT (each product's own rate)
  - Shipping cost against the server's ShippingQuote

Every check compares within PRICE_TOLERANCE and reports a PriceMismatch; no
value is ever corrected. A manipulated client total must reject the order.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from simshop.config import PRICE_TOLERANCE
from simshop.models.order_models import OrderSubmission
from simshop.models.pricing_models import PricedLine
from simshop.models.shipping_models import ShippingQuote
from simshop.services.errors import DomainError, PriceMismatch, SkuMismatch
from simshop.services.money import ZERO, line_amount, round2, to_decimal, vat_amount, within_tolerance

logger = logging.getLogger("simshop-reconciliation")


@dataclass(frozen=True)
class ReconciliationResult:
    errors: Tuple[DomainError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


def per_line_vat(lines: Sequence[Tuple[Decimal, Decimal]]) -> Decimal:
    """round2(sum(line_subtotal * vat_rate / 100)) over (line_subtotal, vat_rate) pairs."""
    return round2(sum((vat_amount(sub, rate) for sub, rate in lines), ZERO))


class OrderReconciler:

    def __init__(self, tolerance: Decimal = PRICE_TOLERANCE) -> None:
        self.tolerance = to_decimal(tolerance)

    def _check(
        self,
        errors: List[DomainError],
        field_name: str,
        expected: Decimal,
        received: Decimal,
        line: Optional[int] = None,
        sku: Optional[str] = None,
    ) -> None:
        if not within_tolerance(expected, received, self.tolerance):
            errors.append(PriceMismatch(
                field_name=field_name,
                expected=round2(expected),
                received=to_decimal(received),
                line=line,
                sku=sku,
            ))

    # ------------------------------------------------------------------
    # 1. Additive consistency
    # ------------------------------------------------------------------

    def reconcile(self, order: OrderSubmission) -> ReconciliationResult:
        """
        Verify the order adds up. VAT is taken as supplied: lines may carry
        different rates, so only its contribution to the total is checked.
        """
        errors: List[DomainError] = []
        for idx, item in enumerate(order.order_items, start=1):
            self._check(errors, "lineTotal", line_amount(item.unit_price, item.quantity),
                        item.line_total, line=idx, sku=item.product_sku)
            self._check(errors, "lineSubtotal", line_amount(item.unit_subtotal, item.quantity),
                        item.line_subtotal, line=idx, sku=item.product_sku)

        lines_subtotal = sum((to_decimal(i.line_subtotal) for i in order.order_items), ZERO)
        self._check(errors, "subtotal", lines_subtotal, order.subtotal)

        expected_total = round2(
            to_decimal(order.subtotal) + to_decimal(order.vat_amount) + to_decimal(order.shipping_cost)
        )
        self._check(errors, "totalAmount", expected_total, order.total_amount)

        return self._result(errors, "reconcile")

    # ------------------------------------------------------------------
    # 2. Server-side recomputation
    # ------------------------------------------------------------------

    def verify_priced_lines(
        self, order: OrderSubmission, priced_lines: Sequence[PricedLine]
    ) -> ReconciliationResult:
        """Compare each submitted line with the PricedLine the engine produced for it (same order)."""
        errors: List[DomainError] = []
        for idx, (item, priced) in enumerate(zip(order.order_items, priced_lines), start=1):
            sku = priced.sku
            if item.product_sku != sku:
                errors.append(SkuMismatch(line=idx, expected=sku, received=item.product_sku))
            unit_subtotal = round2(priced.unit_price_ex_vat)
            unit_price = to_decimal(priced.unit_price_with_vat)
            self._check(errors, "unitPrice", unit_price, item.unit_price, line=idx, sku=sku)
            self._check(errors, "unitSubtotal", unit_subtotal, item.unit_subtotal, line=idx, sku=sku)
            self._check(errors, "lineTotal", line_amount(unit_price, item.quantity),
                        item.line_total, line=idx, sku=sku)
            self._check(errors, "lineSubtotal", line_amount(unit_subtotal, item.quantity),
                        item.line_subtotal, line=idx, sku=sku)
        return self._result(errors, "priced lines")

    def verify_vat(
        self, order: OrderSubmission, priced_lines: Sequence[PricedLine]
    ) -> ReconciliationResult:
        """VAT recomputed per line with each product's own rate, never a single global rate."""
        expected = per_line_vat([
            (line_amount(round2(p.unit_price_ex_vat), item.quantity), to_decimal(p.vat_rate))
            for item, p in zip(order.order_items, priced_lines)
        ])
        errors: List[DomainError] = []
        self._check(errors, "vatAmount", expected, order.vat_amount)
        return self._result(errors, "vat")

    def verify_shipping(self, order: OrderSubmission, quote: ShippingQuote) -> ReconciliationResult:
        errors: List[DomainError] = []
        self._check(errors, "shippingCost", quote.total_cost, order.shipping_cost)
        return self._result(errors, "shipping")

    @staticmethod
    def _result(errors: List[DomainError], stage: str) -> ReconciliationResult:
        if errors:
            logger.warning(
                "Order %s check failed: %s", stage, "; ".join(e.message for e in errors)
            )
        return ReconciliationResult(errors=tuple(errors))
