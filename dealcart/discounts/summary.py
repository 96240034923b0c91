"""
Order summary
Combines engine results with cart totals into the final charge breakdown
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, List, Sequence, Tuple

from .calculator import DiscountCalculationResult
from .context import OrderContext

ZERO = Decimal("0")

@dataclass(frozen=True)
class OrderSummary:
    """Final charge breakdown for one evaluation"""
    applied_discounts: Tuple[DiscountCalculationResult, ...]
    total_discount: Decimal
    grand_total: Decimal
    subtotal: Decimal
    shipping_cost: Decimal
    tax_amount: Decimal
    usage_claims: Tuple[Any, ...] = field(default_factory=tuple)

    @property
    def cart_total(self) -> Decimal:
        return self.subtotal + self.shipping_cost + self.tax_amount

class OrderSummaryBuilder:
    """
    Aggregates results into totals

    The total discount is clamped to the cart total, the grand total never
    drops below zero, and every result with a positive amount and a source
    rule becomes a usage claim for the caller to persist.
    """

    def build(
        self,
        context: OrderContext,
        results: Sequence[DiscountCalculationResult]
    ) -> OrderSummary:
        total_discount = sum(
            (r.discount_amount for r in results if r.discount_amount is not None),
            ZERO
        )

        cart_total = context.cart_total()

        if total_discount > cart_total:
            total_discount = cart_total

        grand_total = cart_total - total_discount
        if grand_total < ZERO:
            grand_total = ZERO

        return OrderSummary(
            applied_discounts=tuple(results),
            total_discount=total_discount,
            grand_total=grand_total,
            subtotal=context.subtotal or ZERO,
            shipping_cost=context.shipping_cost or ZERO,
            tax_amount=context.tax_amount or ZERO,
            usage_claims=tuple(self.usage_claims(results)),
        )

    @staticmethod
    def usage_claims(results: Sequence[DiscountCalculationResult]) -> List[Any]:
        """Rule ids whose usage counter must be incremented"""
        return [
            r.discount_id
            for r in results
            if r.applied_discount is not None
            and r.discount_amount is not None
            and r.discount_amount > ZERO
        ]
