"""
conftest.py — Shared pytest fixtures for the sim-racing shop test suite.

No database or external service fixtures are defined here. Engine tests are
pure unit tests; API tests run the FastAPI app in-process with TestClient over
an in-memory catalog.

Import-path bootstrapping:
    The ``backend/`` directory is inserted into sys.path so that all
    ``simshop.*`` imports resolve correctly regardless of where pytest is invoked.
"""

import sys
import os
from decimal import Decimal

import pytest

# ---------------------------------------------------------------------------
# Ensure ``backend/`` is on the import path before any simshop imports occur.
# ---------------------------------------------------------------------------
_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)


# ---------------------------------------------------------------------------
# Engine fixtures, one instance per session
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def pricing_engine():
    from simshop.services.pricing_engine import ConfigurationPricingEngine
    return ConfigurationPricingEngine()


@pytest.fixture(scope="session")
def shipping_engine():
    from simshop.services.shipping_engine import ShippingCostEngine
    return ShippingCostEngine()


@pytest.fixture(scope="session")
def reconciler():
    from simshop.services.order_reconciliation import OrderReconciler
    return OrderReconciler()


# ---------------------------------------------------------------------------
# Catalog fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def wheel():
    """
    Customizable wheel base: base 100.00 ex-VAT, 21 % VAT, 2 kg, 10 production days.
    Options: required group "Rim", optional group "Paddles".
    """
    from simshop.models.catalog_schema import Product
    return Product(
        id="p-wheel",
        sku="WHL-GT-100",
        name="GT Wheel Base",
        base_price=Decimal("100.00"),
        vat_rate=Decimal("21.00"),
        is_customizable=True,
        base_production_days=10,
        weight_grams=2000,
    )


@pytest.fixture
def wheel_options():
    from simshop.models.catalog_schema import ComponentOption
    return [
        ComponentOption(
            id="opt-rim-gt", product_id="p-wheel", option_group="Rim",
            is_group_required=True, price_modifier=Decimal("20.00"),
            component_id="c-rim-gt", component_name="GT Rim 300mm",
            is_default=True, display_order=1,
        ),
        ComponentOption(
            id="opt-rim-formula", product_id="p-wheel", option_group="Rim",
            is_group_required=True, price_modifier=Decimal("35.50"),
            component_id="c-rim-formula", component_name="Formula Rim",
            display_order=2, in_stock=False,
        ),
        ComponentOption(
            id="opt-paddle-mag", product_id="p-wheel", option_group="Paddles",
            price_modifier=Decimal("15.00"),
            component_id="c-paddle-mag", component_name="Magnetic Paddles",
            display_order=4,
        ),
        ComponentOption(
            id="opt-paddle-std", product_id="p-wheel", option_group="Paddles",
            price_modifier=Decimal("0.00"),
            component_id="c-paddle-std", component_name="Standard Paddles",
            is_default=True, display_order=3,
        ),
    ]


@pytest.fixture
def stand():
    """Non-customizable cockpit stand: base 100.00, 21 % VAT, 5 kg."""
    from simshop.models.catalog_schema import Product
    return Product(
        id="p-stand",
        sku="STD-COCKPIT",
        name="Cockpit Stand",
        base_price=Decimal("100.00"),
        vat_rate=Decimal("21.00"),
        is_customizable=False,
        base_production_days=3,
        weight_grams=5000,
    )


@pytest.fixture
def baleares_zone():
    from simshop.models.catalog_schema import ShippingZone
    return ShippingZone(
        name="Baleares",
        postal_code_prefixes="07",
        base_cost=Decimal("10.00"),
        cost_per_kg=Decimal("1.00"),
        free_shipping_threshold=Decimal("150.00"),
    )


@pytest.fixture
def catalog(wheel, wheel_options, stand):
    from simshop.models.catalog_schema import Product
    from simshop.services.catalog_store import CatalogStore
    retired = Product(id="p-retired", sku="OLD-1", base_price=Decimal("50.00"), is_active=False)
    return CatalogStore([wheel, stand, retired], wheel_options)


@pytest.fixture
def zone_store():
    from simshop.services.catalog_store import ShippingZoneStore
    return ShippingZoneStore.default()


@pytest.fixture
def checkout(catalog, zone_store):
    from simshop.services.checkout_service import CheckoutService
    return CheckoutService(catalog, zone_store)


@pytest.fixture
def address():
    from simshop.models.order_models import ShippingAddress
    return ShippingAddress(
        shipping_street="Calle Mayor 1",
        shipping_city="Palma",
        shipping_postal_code="07001",
    )


@pytest.fixture
def client(catalog, zone_store):
    from fastapi.testclient import TestClient
    from simshop.main import create_app
    return TestClient(create_app(catalog=catalog, zones=zone_store))
