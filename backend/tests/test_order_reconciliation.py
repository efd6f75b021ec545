"""
test_order_reconciliation.py — Unit tests for OrderReconciler.

Tests cover:
  - A consistent order passes every check
  - Line total / line subtotal / subtotal / total mismatches
  - One-cent tolerance boundary
  - Line prices compared with server-side PricedLines
  - VAT recomputed per line at each product's own rate
  - Shipping cost compared with the server's quote
  - Line SKU compared with the catalog SKU
  - PriceMismatch and SkuMismatch message format

All tests are pure unit tests; no database or external services required.
"""

from decimal import Decimal

import pytest

from simshop.models.order_models import OrderItemSubmission, OrderSubmission
from simshop.models.pricing_models import PricedLine
from simshop.models.shipping_models import ShippingQuote
from simshop.services.errors import PriceMismatch, SkuMismatch
from simshop.services.order_reconciliation import OrderReconciler, per_line_vat


def _item(**overrides):
    data = dict(
        product_id="p-wheel",
        product_name="GT Wheel Base",
        product_sku="WHL-GT-100",
        selected_option_ids=["opt-rim-gt"],
        quantity=2,
        unit_price=Decimal("145.20"),
        unit_subtotal=Decimal("120.00"),
        line_total=Decimal("290.40"),
        line_subtotal=Decimal("240.00"),
    )
    data.update(overrides)
    return OrderItemSubmission(**data)


def _order(items=None, **overrides):
    data = dict(
        shipping_street="Calle Mayor 1",
        shipping_city="Palma",
        shipping_postal_code="07001",
        subtotal=Decimal("240.00"),
        vat_amount=Decimal("50.40"),
        shipping_cost=Decimal("0.00"),
        total_amount=Decimal("290.40"),
        order_items=items or [_item()],
    )
    data.update(overrides)
    return OrderSubmission(**data)


def _priced(ex_vat="120.00", with_vat="145.20", rate="21.00", sku="WHL-GT-100"):
    return PricedLine(
        product_id="p-wheel",
        sku=sku,
        unit_price_ex_vat=Decimal(ex_vat),
        unit_price_with_vat=Decimal(with_vat),
        vat_rate=Decimal(rate),
    )


def _quote(total="0.00"):
    return ShippingQuote(
        zone_name="Baleares",
        base_cost=Decimal("10.00"),
        weight_cost=Decimal("4.00"),
        total_cost=Decimal(total),
        weight_kg=Decimal("4"),
        is_free_shipping=Decimal(total) == 0,
        free_shipping_threshold=Decimal("150.00"),
        subtotal_needed_for_free_shipping=Decimal("0.00"),
    )


# ===========================================================================
# Class 1: Additive reconciliation
# ===========================================================================

class TestReconcile:

    def test_consistent_order_passes(self, reconciler):
        assert reconciler.reconcile(_order()).ok

    def test_line_total_mismatch(self, reconciler):
        order = _order([_item(line_total=Decimal("280.40"))], total_amount=Decimal("290.40"))
        errors = reconciler.reconcile(order).errors
        assert errors == (PriceMismatch(
            field_name="lineTotal", expected=Decimal("290.40"), received=Decimal("280.40"),
            line=1, sku="WHL-GT-100",
        ),)

    def test_line_subtotal_mismatch(self, reconciler):
        order = _order([_item(line_subtotal=Decimal("230.00"))])
        kinds = [e.field_name for e in reconciler.reconcile(order).errors]
        # The lowered line subtotal also breaks the order subtotal
        assert kinds == ["lineSubtotal", "subtotal"]

    def test_manipulated_total_rejected(self, reconciler):
        errors = reconciler.reconcile(_order(total_amount=Decimal("200.00"))).errors
        assert len(errors) == 1
        assert errors[0].field_name == "totalAmount"
        assert errors[0].expected == Decimal("290.40")

    def test_total_includes_shipping(self, reconciler):
        order = _order(shipping_cost=Decimal("12.00"), total_amount=Decimal("302.40"))
        assert reconciler.reconcile(order).ok

    @pytest.mark.parametrize("total,ok", [
        ("290.41", True),
        ("290.39", True),
        ("290.42", False),
    ])
    def test_one_cent_tolerance(self, reconciler, total, ok):
        assert reconciler.reconcile(_order(total_amount=Decimal(total))).ok is ok

    def test_custom_tolerance(self):
        lenient = OrderReconciler(tolerance=Decimal("0.05"))
        assert lenient.reconcile(_order(total_amount=Decimal("290.45"))).ok

    def test_multiple_lines_summed(self, reconciler):
        items = [
            _item(),
            _item(product_id="p-stand", product_sku="STD-COCKPIT", product_name="Stand",
                  selected_option_ids=[], quantity=1, unit_price=Decimal("121.00"),
                  unit_subtotal=Decimal("100.00"), line_total=Decimal("121.00"),
                  line_subtotal=Decimal("100.00")),
        ]
        order = _order(items, subtotal=Decimal("340.00"), vat_amount=Decimal("71.40"),
                       total_amount=Decimal("411.40"))
        assert reconciler.reconcile(order).ok


# ===========================================================================
# Class 2: Server-side comparison
# ===========================================================================

class TestServerComparison:

    def test_priced_lines_match(self, reconciler):
        assert reconciler.verify_priced_lines(_order(), [_priced()]).ok

    def test_client_unit_price_too_low(self, reconciler):
        """A client-side discount on the unit price is caught even if the line adds up."""
        item = _item(unit_price=Decimal("100.00"), line_total=Decimal("200.00"))
        errors = reconciler.verify_priced_lines(_order([item]), [_priced()]).errors
        assert [e.field_name for e in errors] == ["unitPrice", "lineTotal"]
        assert errors[0].expected == Decimal("145.20")
        assert errors[0].received == Decimal("100.00")

    def test_unit_subtotal_compared_rounded(self, reconciler):
        priced = _priced(ex_vat="120.004")
        assert reconciler.verify_priced_lines(_order(), [priced]).ok

    def test_sku_mismatch_reported_first(self, reconciler):
        """A swapped SKU is flagged even when every amount on the line is correct."""
        item = _item(product_sku="FAKE-SKU")
        errors = reconciler.verify_priced_lines(_order([item]), [_priced()]).errors
        assert errors == (SkuMismatch(line=1, expected="WHL-GT-100", received="FAKE-SKU"),)

    def test_vat_per_line(self, reconciler):
        assert reconciler.verify_vat(_order(), [_priced()]).ok

    def test_vat_uses_each_line_rate(self, reconciler):
        """21 % on 240.00 plus 10 % on 100.00 = 50.40 + 10.00."""
        items = [
            _item(),
            _item(product_id="p-book", product_sku="BOOK", product_name="Setup guide",
                  selected_option_ids=[], quantity=1, unit_price=Decimal("110.00"),
                  unit_subtotal=Decimal("100.00"), line_total=Decimal("110.00"),
                  line_subtotal=Decimal("100.00")),
        ]
        order = _order(items, subtotal=Decimal("340.00"), vat_amount=Decimal("60.40"),
                       total_amount=Decimal("400.40"))
        priced = [_priced(), _priced(ex_vat="100.00", with_vat="110.00", rate="10.00", sku="BOOK")]
        assert reconciler.verify_vat(order, priced).ok

    def test_wrong_vat_rejected(self, reconciler):
        errors = reconciler.verify_vat(_order(vat_amount=Decimal("48.00")), [_priced()]).errors
        assert errors[0].field_name == "vatAmount"
        assert errors[0].expected == Decimal("50.40")

    def test_shipping_matches_quote(self, reconciler):
        assert reconciler.verify_shipping(_order(), _quote("0.00")).ok

    def test_shipping_underpaid(self, reconciler):
        errors = reconciler.verify_shipping(_order(), _quote("12.00")).errors
        assert errors[0].field_name == "shippingCost"
        assert errors[0].message == "Incorrect shippingCost: expected 12.00, received 0.00"


# ===========================================================================
# Class 3: Helpers
# ===========================================================================

class TestHelpers:

    def test_per_line_vat_rounded_once(self):
        # 0.125 + 0.125 = 0.25; rounding each line first would give 0.26
        lines = [(Decimal("1.25"), Decimal("10")), (Decimal("1.25"), Decimal("10"))]
        assert per_line_vat(lines) == Decimal("0.25")

    def test_mismatch_message_with_sku(self):
        error = PriceMismatch(field_name="lineTotal", expected=Decimal("290.4"),
                              received=Decimal("280.4"), line=1, sku="WHL-GT-100")
        assert error.message == "Incorrect lineTotal for 'WHL-GT-100': expected 290.40, received 280.40"

    def test_mismatch_to_dict(self):
        payload = PriceMismatch(field_name="subtotal", expected=Decimal("1.00"),
                                received=Decimal("2.00")).to_dict()
        assert payload["fieldName"] == "subtotal"
        assert payload["expected"] == 1.0
        assert "line" not in payload and "sku" not in payload

    def test_sku_mismatch_to_dict(self):
        error = SkuMismatch(line=2, expected="STD-COCKPIT", received="FAKE-SKU")
        assert error.message == (
            "Product SKU does not match on line 2 (expected: STD-COCKPIT, received: FAKE-SKU)"
        )
        assert error.to_dict()["kind"] == "SkuMismatch"
        assert error.to_dict()["received"] == "FAKE-SKU"
