"""
test_catalog_store.py — Tests for the in-memory catalog and zone snapshots.

Tests cover:
  - Loading products/options from camelCase JSON (dict and file)
  - require_product for missing and inactive products
  - Default Spanish zone table (Península / Baleares / Canarias)
  - Overlapping prefix warning
  - CatalogLoadError for unreadable or invalid snapshots
"""

import json
import logging
from decimal import Decimal

import pytest

from simshop.services.catalog_store import CatalogStore, ShippingZoneStore
from simshop.services.errors import CatalogLoadError, CatalogLookupError


_SNAPSHOT = {
    "products": [
        {
            "id": "p-1",
            "sku": "PED-LC",
            "name": "Load Cell Pedals",
            "basePrice": 249.9,
            "vatRate": 21,
            "isCustomizable": True,
            "baseProductionDays": 5,
            "weightGrams": 4200,
        }
    ],
    "options": [
        {
            "id": "o-1",
            "productId": "p-1",
            "optionGroup": "Pedal set",
            "isGroupRequired": True,
            "priceModifier": 0,
            "componentId": "c-2p",
            "componentName": "2 pedals",
            "isDefault": True,
        },
        {
            "id": "o-2",
            "productId": "p-1",
            "optionGroup": "Pedal set",
            "isGroupRequired": True,
            "priceModifier": 59.95,
            "componentId": "c-3p",
            "componentName": "3 pedals",
        },
    ],
}


class TestCatalogStore:

    def test_from_dict(self):
        store = CatalogStore.from_dict(_SNAPSHOT)
        assert len(store) == 1
        product = store.require_product("p-1")
        assert product.base_price == Decimal("249.9")
        assert product.weight_grams == 4200
        assert [o.id for o in store.options_for("p-1")] == ["o-1", "o-2"]
        assert store.options_for("p-1")[1].price_modifier == Decimal("59.95")

    def test_from_file(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(_SNAPSHOT), encoding="utf-8")
        assert CatalogStore.from_file(str(path)).require_product("p-1").sku == "PED-LC"

    def test_options_for_returns_copy(self):
        store = CatalogStore.from_dict(_SNAPSHOT)
        store.options_for("p-1").clear()
        assert len(store.options_for("p-1")) == 2

    def test_unknown_product(self, catalog):
        assert catalog.options_for("nope") == []
        with pytest.raises(CatalogLookupError):
            catalog.require_product("nope")

    def test_inactive_product_not_sellable(self, catalog):
        with pytest.raises(CatalogLookupError, match="is not available"):
            catalog.require_product("p-retired")

    def test_invalid_snapshot(self):
        with pytest.raises(CatalogLoadError):
            CatalogStore.from_dict({"products": [{"id": "p-1"}]})

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogLoadError):
            CatalogStore.from_file(str(tmp_path / "missing.json"))

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CatalogLoadError):
            CatalogStore.from_file(str(path))


class TestShippingZoneStore:

    def test_default_zones(self, zone_store):
        zones = {z.name: z for z in zone_store.all()}
        assert set(zones) == {"Península", "Baleares", "Canarias"}
        peninsula = zones["Península"].prefixes()
        assert "28" in peninsula and "52" in peninsula
        assert not {"07", "35", "38"} & set(peninsula)
        assert zones["Canarias"].prefixes() == ["35", "38"]

    def test_default_zones_do_not_overlap(self, caplog):
        with caplog.at_level(logging.WARNING, logger="simshop-catalog"):
            ShippingZoneStore.default()
        assert not caplog.records

    def test_overlap_warning(self, caplog):
        rows = [
            {"name": "Islas", "postalCodePrefixes": "07", "baseCost": 10, "costPerKg": 1,
             "freeShippingThreshold": 150},
            {"name": "Palma", "postalCodePrefixes": "070", "baseCost": 8, "costPerKg": 1,
             "freeShippingThreshold": 150},
        ]
        with caplog.at_level(logging.WARNING, logger="simshop-catalog"):
            ShippingZoneStore.from_dicts(rows)
        assert "07" in caplog.text

    def test_from_file_requires_list(self, tmp_path):
        path = tmp_path / "zones.json"
        path.write_text(json.dumps({"name": "x"}), encoding="utf-8")
        with pytest.raises(CatalogLoadError, match="expected a list"):
            ShippingZoneStore.from_file(str(path))

    def test_from_file(self, tmp_path):
        path = tmp_path / "zones.json"
        path.write_text(json.dumps([{
            "name": "Madrid", "postalCodePrefixes": "28", "baseCost": "4.00",
            "costPerKg": "0.25", "freeShippingThreshold": "80.00",
        }]), encoding="utf-8")
        zones = ShippingZoneStore.from_file(str(path)).all()
        assert zones[0].cost_per_kg == Decimal("0.25")

    def test_invalid_zone_row(self):
        with pytest.raises(CatalogLoadError):
            ShippingZoneStore.from_dicts([{"name": "Broken"}])
