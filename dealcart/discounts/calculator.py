"""
Discount calculators
One dispatch over the rule kind producing the monetary result of a rule
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Dict, Mapping, Optional

from .context import OrderContext
from .rules import Discount, DiscountKind, DiscountValueType
from .validator import matched_quantity

ZERO = Decimal("0.00")
CENT = Decimal("0.01")

@dataclass(frozen=True)
class DiscountCalculationResult:
    """Computed effect of one applied rule"""
    discount_amount: Decimal
    discount_name: str
    message: str
    value_type: Optional[DiscountValueType] = None
    discount_code: Optional[str] = None
    applied_discount: Optional[Discount] = None
    item_discounts: Mapping[Any, Decimal] = field(default_factory=dict)

    @property
    def discount_id(self) -> Any:
        return self.applied_discount.id if self.applied_discount is not None else None

def compute_amount(discount: Discount, subtotal: Optional[Decimal]) -> Decimal:
    """
    Shared numeric policy

    Percentage of the subtotal rounded half-up to cents, or the fixed amount
    as-is, clipped to maximum_discount_amount. Other value types yield zero.
    """
    value = discount.discount_value if discount.discount_value is not None else ZERO
    amount = ZERO

    if discount.value_type == DiscountValueType.PERCENTAGE:
        base = subtotal if subtotal is not None else ZERO
        amount = (base * value / Decimal(100)).quantize(CENT, rounding=ROUND_HALF_UP)
    elif discount.value_type == DiscountValueType.FIXED_AMOUNT:
        amount = value

    cap = discount.maximum_discount_amount
    if cap is not None and amount > cap:
        amount = cap

    return amount

def _calculate_coupon(discount: Discount, context: OrderContext) -> DiscountCalculationResult:
    return DiscountCalculationResult(
        discount_amount=compute_amount(discount, context.subtotal),
        discount_name=discount.name,
        discount_code=discount.code,
        applied_discount=discount,
        value_type=discount.value_type,
        message=f"Coupon applied: {discount.name}",
    )

def _calculate_bulk(discount: Discount, context: OrderContext) -> DiscountCalculationResult:
    # Recomputed here since callers may skip the validator
    if matched_quantity(discount, context) >= discount.terms.minimum_quantity:
        amount = compute_amount(discount, context.subtotal)
        message = f"Bulk discount applied: {discount.name}"
    else:
        amount = ZERO
        message = "Minimum quantity not met for bulk discount"

    return DiscountCalculationResult(
        discount_amount=amount,
        discount_name=discount.name,
        applied_discount=discount,
        value_type=discount.value_type,
        message=message,
    )

def _calculate_promotion(discount: Discount, context: OrderContext) -> None:
    # TODO: define promotion pricing once promotion terms carry a rate
    return None

CALCULATORS: Dict[DiscountKind, Callable[[Discount, OrderContext], Optional[DiscountCalculationResult]]] = {
    DiscountKind.COUPON: _calculate_coupon,
    DiscountKind.BULK_DISCOUNT: _calculate_bulk,
    DiscountKind.PROMOTION: _calculate_promotion,
}

def calculate(discount: Discount, context: OrderContext) -> Optional[DiscountCalculationResult]:
    """
    Compute the result of a rule against a context

    Returns None for kinds that have no pricing (promotions).
    """
    return CALCULATORS[discount.kind](discount, context)
