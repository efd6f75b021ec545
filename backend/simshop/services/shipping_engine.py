"""
ShippingCostEngine — zone lookup and shipping cost for a destination.

Covers:
  - Postal code normalization (leading digits only)
  - Zone resolution by comma-separated prefix list, active zones only,
    longest matching prefix wins, ties go to the earlier zone in the list
  - Cost = base fee + per-kg fee, zero once the subtotal reaches the
    zone's free-shipping threshold (threshold <= 0 means always free)
  - Remaining subtotal needed to qualify for free shipping
"""

import logging
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from simshop.models.catalog_schema import ShippingZone
from simshop.models.shipping_models import ShippingQuote, ShippingZoneSummary
from simshop.services.errors import ZoneNotFound
from simshop.services.money import ZERO, Number, round2, to_decimal

logger = logging.getLogger("simshop-shipping")

_LEADING_DIGITS = re.compile(r"^\d+")


@dataclass(frozen=True)
class ShippingResult:
    quote: Optional[ShippingQuote] = None
    error: Optional[ZoneNotFound] = None

    @property
    def ok(self) -> bool:
        return self.quote is not None


def normalize_postal_code(postal_code: Optional[str]) -> str:
    """'07001' -> '07001', ' 28080-A ' -> '28080', 'ABC' -> ''."""
    match = _LEADING_DIGITS.match((postal_code or "").strip())
    return match.group(0) if match else ""


class ShippingCostEngine:
    """Stateless; zones are passed on every call."""

    # ------------------------------------------------------------------
    # 1. Zone resolution
    # ------------------------------------------------------------------

    def resolve_zone(
        self, postal_code: Optional[str], zones: Sequence[ShippingZone]
    ) -> Optional[ShippingZone]:
        code = normalize_postal_code(postal_code)
        if not code:
            return None

        best: Optional[ShippingZone] = None
        best_len = 0
        for zone in zones:
            if not zone.is_active:
                continue
            for prefix in zone.prefixes():
                # Strictly longer only: on equal length the earlier zone keeps the match
                if code.startswith(prefix) and len(prefix) > best_len:
                    best, best_len = zone, len(prefix)
        return best

    def active_zones(self, zones: Sequence[ShippingZone]) -> List[ShippingZone]:
        return sorted((z for z in zones if z.is_active), key=lambda z: z.name)

    @staticmethod
    def summarize(zone: ShippingZone) -> ShippingZoneSummary:
        return ShippingZoneSummary(
            name=zone.name,
            base_cost=zone.base_cost,
            cost_per_kg=zone.cost_per_kg,
            free_shipping_threshold=zone.free_shipping_threshold,
        )

    # ------------------------------------------------------------------
    # 2. Cost computation
    # ------------------------------------------------------------------

    def quote_for_zone(self, zone: ShippingZone, subtotal: Number, weight_kg: Number) -> ShippingQuote:
        subtotal = to_decimal(subtotal)
        weight = max(ZERO, to_decimal(weight_kg))
        threshold = to_decimal(zone.free_shipping_threshold)

        weight_cost = round2(weight * to_decimal(zone.cost_per_kg))
        base_total = to_decimal(zone.base_cost) + weight_cost
        is_free = threshold <= ZERO or subtotal >= threshold

        return ShippingQuote(
            zone_name=zone.name,
            base_cost=zone.base_cost,
            weight_cost=weight_cost,
            total_cost=Decimal("0.00") if is_free else round2(base_total),
            weight_kg=weight,
            is_free_shipping=is_free,
            free_shipping_threshold=threshold,
            subtotal_needed_for_free_shipping=Decimal("0.00") if is_free else round2(threshold - subtotal),
        )

    def quote_shipping(
        self,
        postal_code: Optional[str],
        subtotal: Number,
        weight_kg: Number,
        zones: Sequence[ShippingZone],
    ) -> ShippingResult:
        """
        Quote shipping to ``postal_code``.

        Args:
            postal_code: destination; only its leading digits are matched.
            subtotal:    order subtotal compared against the free-shipping threshold.
            weight_kg:   package weight; negative values are treated as 0.
            zones:       zone snapshot, in the order the collaborator returned it.

        Returns:
            ShippingResult with the quote, or with ZoneNotFound.
        """
        zone = self.resolve_zone(postal_code, zones)
        if zone is None:
            logger.warning(
                "No shipping zone found for postal code: %s", postal_code,
                extra={"postal_code": postal_code},
            )
            return ShippingResult(error=ZoneNotFound(postal_code=postal_code or ""))

        quote = self.quote_for_zone(zone, subtotal, weight_kg)
        if quote.is_free_shipping:
            logger.info(
                "Free shipping applied for %s: subtotal %s >= threshold %s",
                postal_code, subtotal, zone.free_shipping_threshold,
                extra={"postal_code": postal_code},
            )
        else:
            logger.debug(
                "Shipping for %s (%s): base %s + weight %s = %s",
                postal_code, zone.name, zone.base_cost, quote.weight_cost, quote.total_cost,
                extra={"postal_code": postal_code},
            )
        return ShippingResult(quote=quote)


def zone_prefix_table(zones: Sequence[ShippingZone]) -> List[Tuple[str, str]]:
    """(prefix, zone name) pairs for active zones; used to spot overlapping configuration."""
    return [(p, z.name) for z in zones if z.is_active for p in z.prefixes()]
