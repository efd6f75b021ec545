"""
Shop configuration — single source of truth for pricing tolerances,
request limits and collaborator file locations.

Import from here in engines, services and routes rather than hardcoding values.
Values that operators may change per deployment are read from the environment.
"""
from __future__ import annotations

import os
from decimal import Decimal

from dotenv import load_dotenv

load_dotenv()


# ── Money ─────────────────────────────────────────────────────────────────────

# Client and server round independently; differences up to one cent are accepted
PRICE_TOLERANCE: Decimal = Decimal(os.getenv("SIMSHOP_PRICE_TOLERANCE", "0.01"))

# Applied when a product record carries no explicit VAT rate (Spanish IVA)
DEFAULT_VAT_RATE: Decimal = Decimal("21.00")

DEFAULT_PRODUCTION_DAYS: int = 7


# ── Request limits (structural validation) ────────────────────────────────────

POSTAL_CODE_PATTERN: str = r"^\d{5}$"
MAX_SHIPPING_WEIGHT_KG: Decimal = Decimal("1000")
MAX_CART_QUANTITY: int = 99
MAX_ORDER_LINE_QUANTITY: int = 100
MAX_ORDER_LINES: int = 50
DEFAULT_COUNTRY: str = "ES"


# ── Collaborator snapshots ────────────────────────────────────────────────────

# JSON files with {"products": [...], "options": [...]} and [zone, ...]
CATALOG_FILE: str = os.getenv("SIMSHOP_CATALOG_FILE", "")
SHIPPING_ZONES_FILE: str = os.getenv("SIMSHOP_SHIPPING_ZONES_FILE", "")


# ── Logging / HTTP ────────────────────────────────────────────────────────────

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON: bool = os.getenv("LOG_FORMAT", "json").lower() != "text"

_cors_default = "http://localhost:3000,http://localhost:8000"
CORS_ORIGINS: list[str] = [
    o.strip() for o in os.getenv("CORS_ORIGINS", _cors_default).split(",") if o.strip()
]

API_VERSION: str = "1.0.0"
