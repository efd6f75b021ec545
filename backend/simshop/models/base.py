"""Shared pydantic base for every wire-visible model (camelCase JSON, Decimal money)."""
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, PlainSerializer
from pydantic.alias_generators import to_camel

# Fixed-point in Python, plain JSON number on the wire (the storefront reads numbers)
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ShopModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class SnapshotModel(ShopModel):
    """Immutable engine output; superseded by recomputation, never edited."""
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "frozen": True,
    }
