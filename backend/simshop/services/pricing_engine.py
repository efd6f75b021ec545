"""
ConfigurationPricingEngine — unit price for a configurable product.

Covers:
  - Selection validation against option-group rules
      * option must belong to the product (UnknownOption)
      * single-choice groups (MultipleSelectionsInGroup)
      * required groups (MissingRequiredGroup) — no default substitution
  - Unit price ex-VAT = base price + sum of option price modifiers
  - Unit price with VAT, rounded half-up once at the final multiplication
  - Resolved (group, component) display list in option display order
  - Configurator helpers: grouped option view, default pre-selection

Pure and stateless: every call works only on the snapshot it is given.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from simshop.models.catalog_schema import ComponentOption, Product
from simshop.models.pricing_models import OptionGroupView, PricedLine, ResolvedOption
from simshop.services.errors import (
    DomainError,
    MissingRequiredGroup,
    MultipleSelectionsInGroup,
    UnknownOption,
)
from simshop.services.money import apply_vat, to_decimal

logger = logging.getLogger("simshop-pricing")


@dataclass(frozen=True)
class PricingResult:
    line: Optional[PricedLine] = None
    errors: Tuple[DomainError, ...] = ()

    @property
    def ok(self) -> bool:
        return self.line is not None and not self.errors


def _unique(ids: Iterable[str]) -> List[str]:
    seen: Dict[str, None] = {}
    for option_id in ids:
        seen.setdefault(str(option_id), None)
    return list(seen)


def _resolve(option: ComponentOption) -> ResolvedOption:
    return ResolvedOption(
        group_name=option.option_group,
        component_id=option.component_id,
        component_name=option.component_name,
        option_id=option.id,
        price_modifier=option.price_modifier,
    )


def _display_key(option: ComponentOption):
    return (option.display_order, option.option_group, option.id)


class ConfigurationPricingEngine:
    """
    Validates a component selection for one product and prices it.

    All monetary values are ex-VAT Decimals unless the field name says otherwise.
    """

    # ------------------------------------------------------------------
    # 1. Selection validation
    # ------------------------------------------------------------------

    def validate_selection(
        self,
        product: Product,
        available_options: Sequence[ComponentOption],
        selected_option_ids: Sequence[str],
    ) -> List[DomainError]:
        """
        Check a selection against the product's option groups.

        All rules are evaluated and every violation is returned, in rule order:
        unknown ids (in the order supplied), then multi-selected groups, then
        missing required groups (both in first-seen group order).
        """
        errors: List[DomainError] = []
        own_options = {o.id: o for o in available_options if o.product_id == product.id}
        requested = _unique(selected_option_ids)

        if not product.is_customizable:
            # Only the empty selection is valid for a fixed product
            return [UnknownOption(option_id=oid, product_id=product.id) for oid in requested]

        chosen: List[ComponentOption] = []
        for option_id in requested:
            option = own_options.get(option_id)
            if option is None:
                errors.append(UnknownOption(option_id=option_id, product_id=product.id))
            else:
                chosen.append(option)

        by_group: Dict[str, List[str]] = {}
        for option in chosen:
            by_group.setdefault(option.option_group, []).append(option.id)
        for group, ids in by_group.items():
            if len(ids) > 1:
                errors.append(MultipleSelectionsInGroup(group=group, option_ids=tuple(ids)))

        for group in self.required_groups(own_options.values()):
            if group not in by_group:
                errors.append(MissingRequiredGroup(group=group))

        return errors

    @staticmethod
    def required_groups(options: Iterable[ComponentOption]) -> List[str]:
        groups: Dict[str, None] = {}
        for option in options:
            if option.is_group_required:
                groups.setdefault(option.option_group, None)
        return list(groups)

    # ------------------------------------------------------------------
    # 2. Pricing
    # ------------------------------------------------------------------

    def price_selection(
        self,
        product: Product,
        available_options: Sequence[ComponentOption],
        selected_option_ids: Sequence[str],
    ) -> PricingResult:
        """
        Validate and price a selection.

        Returns a PricingResult holding either the PricedLine or the list of
        domain errors. Nothing is raised for an invalid selection.
        """
        errors = self.validate_selection(product, available_options, selected_option_ids)
        if errors:
            logger.info(
                "Selection rejected for %s: %s",
                product.sku,
                ", ".join(e.kind for e in errors),
                extra={"product_id": product.id},
            )
            return PricingResult(errors=tuple(errors))

        own_options = {o.id: o for o in available_options if o.product_id == product.id}
        chosen = sorted(
            (own_options[oid] for oid in _unique(selected_option_ids)),
            key=_display_key,
        )

        # Full precision until the VAT multiplication
        unit_ex_vat = to_decimal(product.base_price) + sum(
            (to_decimal(o.price_modifier) for o in chosen), Decimal("0")
        )
        unit_with_vat = apply_vat(unit_ex_vat, product.vat_rate)

        line = PricedLine(
            product_id=product.id,
            sku=product.sku,
            product_name=product.name,
            unit_price_ex_vat=unit_ex_vat,
            unit_price_with_vat=unit_with_vat,
            vat_rate=product.vat_rate,
            selections=[_resolve(o) for o in chosen],
            base_production_days=product.base_production_days,
            weight_grams=product.weight_grams,
        )
        logger.debug(
            "Priced %s: %s ex-VAT / %s with VAT (%d options)",
            product.sku, unit_ex_vat, unit_with_vat, len(chosen),
            extra={"product_id": product.id},
        )
        return PricingResult(line=line)

    # ------------------------------------------------------------------
    # 3. Configurator helpers
    # ------------------------------------------------------------------

    def group_options(self, options: Sequence[ComponentOption]) -> List[OptionGroupView]:
        """Options grouped in first-seen group order, each group sorted by display order."""
        grouped: Dict[str, List[ComponentOption]] = {}
        for option in options:
            grouped.setdefault(option.option_group, []).append(option)

        views: List[OptionGroupView] = []
        for name, members in grouped.items():
            members = sorted(members, key=_display_key)
            default = next((o for o in members if o.is_default), None)
            views.append(OptionGroupView(
                name=name,
                is_required=any(o.is_group_required for o in members),
                default_option_id=default.id if default else None,
                options=[_resolve(o) for o in members],
            ))
        return views

    def default_selection(self, options: Sequence[ComponentOption]) -> List[str]:
        """
        Ids a configurator should pre-select: each group's default option when it
        is in stock. Groups without an in-stock default are left empty, so a
        required group can still fail validation if the customer never picks.
        """
        selection: List[str] = []
        for view_group in self.group_options(options):
            default_id = view_group.default_option_id
            if default_id is None:
                continue
            option = next(o for o in options if o.id == default_id)
            if option.in_stock:
                selection.append(default_id)
        return selection
