"""
Error taxonomy for the pricing / shipping core.

Domain violations (a bad selection, an unserved postal code, an order whose
totals do not add up) are returned as values so the caller can decide on
user-facing messaging. Exceptions are reserved for collaborator faults such as
a product id that does not exist in the catalog snapshot.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, ClassVar, Dict, Optional, Tuple


# ---------------------------------------------------------------------------
# Domain errors (returned, never raised)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DomainError:
    kind: ClassVar[str] = "DomainError"

    @property
    def message(self) -> str:
        return self.kind

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"kind": self.kind, "message": self.message}
        for key, value in self.__dict__.items():
            if value is None:
                continue
            payload[_camel(key)] = float(value) if isinstance(value, Decimal) else value
        return payload


@dataclass(frozen=True)
class UnknownOption(DomainError):
    kind: ClassVar[str] = "UnknownOption"
    option_id: str
    product_id: str

    @property
    def message(self) -> str:
        return f"Option {self.option_id} is not available for product {self.product_id}"


@dataclass(frozen=True)
class MultipleSelectionsInGroup(DomainError):
    kind: ClassVar[str] = "MultipleSelectionsInGroup"
    group: str
    option_ids: Tuple[str, ...] = ()

    @property
    def message(self) -> str:
        return f"Only one option can be selected in group '{self.group}' ({len(self.option_ids)} given)"


@dataclass(frozen=True)
class MissingRequiredGroup(DomainError):
    kind: ClassVar[str] = "MissingRequiredGroup"
    group: str

    @property
    def message(self) -> str:
        return f"Group '{self.group}' requires a selection"


@dataclass(frozen=True)
class ZoneNotFound(DomainError):
    kind: ClassVar[str] = "ZoneNotFound"
    postal_code: str

    @property
    def message(self) -> str:
        return f"No shipping zone configured for postal code {self.postal_code}"


@dataclass(frozen=True)
class PriceMismatch(DomainError):
    kind: ClassVar[str] = "PriceMismatch"
    field_name: str
    expected: Decimal
    received: Decimal
    line: Optional[int] = None   # 1-based order line, None for order-level fields
    sku: Optional[str] = None

    @property
    def message(self) -> str:
        where = f" for '{self.sku}'" if self.sku else (f" on line {self.line}" if self.line else "")
        return f"Incorrect {self.field_name}{where}: expected {self.expected:.2f}, received {self.received:.2f}"


@dataclass(frozen=True)
class SkuMismatch(DomainError):
    kind: ClassVar[str] = "SkuMismatch"
    line: int
    expected: str
    received: str

    @property
    def message(self) -> str:
        return f"Product SKU does not match on line {self.line} (expected: {self.expected}, received: {self.received})"


@dataclass(frozen=True)
class OrderNotPlaceable(DomainError):
    kind: ClassVar[str] = "OrderNotPlaceable"
    reason: str

    @property
    def message(self) -> str:
        return f"Order cannot be placed: {self.reason}"


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


# ---------------------------------------------------------------------------
# Collaborator faults (raised)
# ---------------------------------------------------------------------------

class SimshopError(Exception):
    """Base exception for all simshop errors."""


class CatalogLookupError(SimshopError):
    """Raised when a referenced product is missing from, or inactive in, the catalog."""

    def __init__(self, product_id: str, reason: str = "not found") -> None:
        super().__init__(f"Product {product_id} {reason}")
        self.product_id = product_id
        self.reason = reason


class CatalogLoadError(SimshopError):
    """Raised when a catalog or zone snapshot file cannot be parsed."""
