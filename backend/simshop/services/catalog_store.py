"""
In-memory catalog and shipping-zone snapshots.

Stands at the repository seam: the engines receive plain lists taken from
here and never write back. Snapshots load from JSON files named in config, or
fall back to the shop's default zones and an empty catalog.
"""
import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List

from pydantic import ValidationError

from simshop.models.catalog_schema import ComponentOption, Product, ShippingZone
from simshop.services.errors import CatalogLoadError, CatalogLookupError
from simshop.services.shipping_engine import zone_prefix_table

logger = logging.getLogger("simshop-catalog")


# ---------------------------------------------------------------------------
# Default zones (Spain). Península excludes 07 (Baleares) and 35/38 (Canarias).
# ---------------------------------------------------------------------------
_PENINSULA_PREFIXES = ",".join(
    f"{n:02d}" for n in range(1, 53) if n not in (7, 35, 38)
)

DEFAULT_SHIPPING_ZONES: List[Dict] = [
    {
        "name": "Península",
        "postalCodePrefixes": _PENINSULA_PREFIXES,
        "baseCost": "5.00",
        "costPerKg": "0.50",
        "freeShippingThreshold": "100.00",
    },
    {
        "name": "Baleares",
        "postalCodePrefixes": "07",
        "baseCost": "10.00",
        "costPerKg": "1.00",
        "freeShippingThreshold": "150.00",
    },
    {
        "name": "Canarias",
        "postalCodePrefixes": "35,38",
        "baseCost": "15.00",
        "costPerKg": "1.50",
        "freeShippingThreshold": "200.00",
    },
]


def _read_json(path: str):
    try:
        with Path(path).open("r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise CatalogLoadError(f"Failed to load {path}: {e}") from e


class CatalogStore:
    """Products and their component options, keyed by id."""

    def __init__(
        self,
        products: Iterable[Product] = (),
        options: Iterable[ComponentOption] = (),
    ) -> None:
        self._products: Dict[str, Product] = {p.id: p for p in products}
        self._options: Dict[str, List[ComponentOption]] = {}
        for option in options:
            self._options.setdefault(option.product_id, []).append(option)

    @classmethod
    def from_dict(cls, data: Dict) -> "CatalogStore":
        try:
            products = [Product.model_validate(p) for p in data.get("products", [])]
            options = [ComponentOption.model_validate(o) for o in data.get("options", [])]
        except ValidationError as e:
            raise CatalogLoadError(f"Invalid catalog snapshot: {e}") from e
        return cls(products, options)

    @classmethod
    def from_file(cls, path: str) -> "CatalogStore":
        store = cls.from_dict(_read_json(path))
        logger.info("Catalog loaded from %s: %d products", path, len(store))
        return store

    def __len__(self) -> int:
        return len(self._products)

    def require_product(self, product_id: str) -> Product:
        """Existence lookup done before pricing; only active products can be sold."""
        product = self._products.get(product_id)
        if product is None:
            raise CatalogLookupError(product_id)
        if not product.is_active:
            raise CatalogLookupError(product_id, reason="is not available")
        return product

    def options_for(self, product_id: str) -> List[ComponentOption]:
        return list(self._options.get(product_id, []))


class ShippingZoneStore:
    """Zone table in the order it was loaded (that order breaks prefix-length ties)."""

    def __init__(self, zones: Iterable[ShippingZone] = ()) -> None:
        self._zones: List[ShippingZone] = list(zones)
        self._warn_overlaps()

    @classmethod
    def from_dicts(cls, rows: Iterable[Dict]) -> "ShippingZoneStore":
        try:
            return cls(ShippingZone.model_validate(r) for r in rows)
        except ValidationError as e:
            raise CatalogLoadError(f"Invalid shipping zone snapshot: {e}") from e

    @classmethod
    def from_file(cls, path: str) -> "ShippingZoneStore":
        rows = _read_json(path)
        if not isinstance(rows, list):
            raise CatalogLoadError(f"{path}: expected a list of shipping zones")
        store = cls.from_dicts(rows)
        logger.info("Shipping zones loaded from %s: %d zones", path, len(store.all()))
        return store

    @classmethod
    def default(cls) -> "ShippingZoneStore":
        return cls.from_dicts(DEFAULT_SHIPPING_ZONES)

    def all(self) -> List[ShippingZone]:
        return list(self._zones)

    def _warn_overlaps(self) -> None:
        table = zone_prefix_table(self._zones)
        overlapping = sorted({
            a for a, zone_a in table for b, zone_b in table
            if zone_a != zone_b and b.startswith(a)
        })
        if overlapping:
            logger.warning(
                "Shipping prefixes overlap across zones: %s "
                "(longest prefix wins, then zone order)", ", ".join(overlapping)
            )
