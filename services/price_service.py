"""
Price reconciler: keeps base price, stored deltas and displayed prices
consistent.

A variant stores only its delta from the base price. When the base price
changes, deltas are rebased so every variant keeps the absolute price the
user last saw:

    new_adjustment = (old_base + old_adjustment) - new_base

Rebasing happens once per distinct base price change (not on the initial
load, and not when the same price is observed again), so repeated
evaluation never drifts.
"""

from decimal import Decimal
from typing import Optional

import structlog

from models.variant import PriceRow, ProductDraft, VariantRecord
from utils.price_utils import Money, format_adjustment, round_to_cents, to_decimal

logger = structlog.get_logger(__name__)


def displayed_price(base_price: Money, price_adjustment: Money) -> Decimal:
    """Absolute price shown for a variant, rounded to cents."""
    return round_to_cents(to_decimal(base_price) + to_decimal(price_adjustment))


def rebase_adjustment(old_base: Money, new_base: Money, price_adjustment: Money) -> Decimal:
    """
    Delta that keeps (old_base + price_adjustment) under new_base.

    Not rounded: new_base + result equals the old unrounded sum exactly, so
    the displayed price is unchanged even for sub-cent deltas.
    """
    absolute = to_decimal(old_base) + to_decimal(price_adjustment)
    return absolute - to_decimal(new_base)


def adjustment_from_price(price: Money, base_price: Money) -> Decimal:
    """Delta for a stored absolute price (loading an existing product)."""
    return round_to_cents(to_decimal(price) - to_decimal(base_price))


def price_rows(draft: ProductDraft) -> list[PriceRow]:
    """Displayed price and formatted delta for every variant."""
    return [
        PriceRow(
            index=index,
            label=variant.label,
            price_adjustment=variant.price_adjustment,
            price=displayed_price(draft.base_price, variant.price_adjustment),
            adjustment_display=format_adjustment(variant.price_adjustment),
        )
        for index, variant in enumerate(draft.variants)
    ]


class PriceReconciler:
    """
    Tracks the previous base price and rebases deltas on change.

    One reconciler per editing session.
    """

    def __init__(self, initial_base_price: Optional[Money] = None):
        self._previous_base: Optional[Decimal] = (
            None if initial_base_price is None else to_decimal(initial_base_price)
        )

    @property
    def previous_base(self) -> Optional[Decimal]:
        return self._previous_base

    def observe(self, base_price: Money, variants: list[VariantRecord]) -> bool:
        """
        Observe the current base price.

        Args:
            base_price: Base price as currently entered
            variants: Variants to rebase in place

        Returns:
            True if deltas were rebased
        """
        new_base = to_decimal(base_price)
        old_base = self._previous_base
        self._previous_base = new_base

        if old_base is None:
            # Initial load
            return False
        if new_base == old_base or not variants:
            return False

        for variant in variants:
            variant.price_adjustment = rebase_adjustment(
                old_base, new_base, variant.price_adjustment
            )

        logger.info(
            "price_adjustments_rebased",
            old_base=str(old_base),
            new_base=str(new_base),
            variant_count=len(variants),
        )
        return True
