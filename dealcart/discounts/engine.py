"""
Discount engine
Fetches candidate rules, validates them, resolves exclusive/stackable
conflicts and collects calculation results
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Collection, Iterable, List, Optional, Protocol, Sequence
import enum
import logging

from .calculator import DiscountCalculationResult, calculate
from .context import OrderContext
from .rules import Discount
from .validator import DiscountValidator

logger = logging.getLogger(__name__)

class ActiveDiscountSource(Protocol):
    """Anything that can list the rules active at a given moment"""

    async def find_active_discounts(self, now: datetime) -> Sequence[Discount]:
        ...

class StackingPolicy(str, enum.Enum):
    """
    How non-exclusive rules combine when no exclusive rule applied

    APPLY_ALL applies every applicable rule whatever its stackable flag.
    STACKABLE_ONLY combines stackable rules and falls back to the single
    best non-stackable rule when no stackable rule produced a result.
    BEST_VALUE picks the larger of the stackable total and the best single
    non-stackable rule, the stackable set winning ties.
    """
    APPLY_ALL = "apply_all"
    STACKABLE_ONLY = "stackable_only"
    BEST_VALUE = "best_value"

def evaluation_order(discounts: Iterable[Discount]) -> List[Discount]:
    """Exclusive rules first, then ascending discount value with missing values last"""
    return sorted(
        discounts,
        key=lambda d: (
            not d.is_exclusive,
            d.discount_value is None,
            d.discount_value if d.discount_value is not None else 0,
        )
    )

def total_amount(results: Iterable[DiscountCalculationResult]) -> Decimal:
    return sum((r.discount_amount or Decimal("0") for r in results), Decimal("0"))

def best_single(results: Sequence[DiscountCalculationResult]) -> List[DiscountCalculationResult]:
    """Largest result, the earliest one in evaluation order on ties"""
    if not results:
        return []
    return [max(results, key=lambda r: r.discount_amount)]

class DiscountEngine:
    """Orchestrates one discount evaluation for an order context"""

    def __init__(
        self,
        repository: ActiveDiscountSource,
        validator: Optional[DiscountValidator] = None,
        stacking_policy: StackingPolicy = StackingPolicy.APPLY_ALL
    ):
        self.repository = repository
        self.validator = validator or DiscountValidator()
        self.stacking_policy = StackingPolicy(stacking_policy)

    def validate_discount(self, discount: Discount, context: OrderContext) -> bool:
        """Single-rule check used by coupon preview flows"""
        return self.validator.is_valid(discount, context)

    async def find_applicable_discounts(
        self,
        context: OrderContext,
        exclude: Collection[Any] = ()
    ) -> List[Discount]:
        """Active rules that pass validation, in evaluation order"""
        candidates = [
            d for d in await self.repository.find_active_discounts(context.order_time)
            if d.id not in exclude
        ]

        if not context.auto_apply:
            codes = set(context.coupon_codes)
            candidates = [d for d in candidates if d.code is not None and d.code in codes]

        applicable = [d for d in candidates if self.validator.is_valid(d, context)]
        logger.debug(f"{len(applicable)} of {len(candidates)} candidate discounts applicable")
        return evaluation_order(applicable)

    async def apply_discounts(
        self,
        context: OrderContext,
        exclude: Collection[Any] = ()
    ) -> List[DiscountCalculationResult]:
        """
        Evaluate every applicable rule for the context

        Args:
            context: Order being priced
            exclude: Ids of rules to leave out, e.g. ones used up meanwhile

        Returns:
            Calculation results in evaluation order, possibly empty
        """
        applicable = await self.find_applicable_discounts(context, exclude)

        # Exclusive rules suppress everything else
        results = self._calculate_all([d for d in applicable if d.is_exclusive], context)
        if results:
            logger.debug(f"{len(results)} exclusive discount(s) applied, others suppressed")
            return results

        return self._resolve_non_exclusive(applicable, context)

    def _calculate_all(
        self,
        discounts: Sequence[Discount],
        context: OrderContext
    ) -> List[DiscountCalculationResult]:
        results = []
        for discount in discounts:
            result = calculate(discount, context)
            if result is None:
                logger.debug(f"Discount {discount.id} ({discount.kind.value}) produced no result")
                continue
            results.append(result)
        return results

    def _resolve_non_exclusive(
        self,
        applicable: Sequence[Discount],
        context: OrderContext
    ) -> List[DiscountCalculationResult]:
        if self.stacking_policy == StackingPolicy.APPLY_ALL:
            return self._calculate_all(applicable, context)

        stacked = self._calculate_all([d for d in applicable if d.is_stackable], context)
        single = best_single(
            self._calculate_all([d for d in applicable if not d.is_stackable], context)
        )

        if self.stacking_policy == StackingPolicy.STACKABLE_ONLY:
            return stacked if stacked else single

        # BEST_VALUE
        if stacked and total_amount(stacked) >= total_amount(single):
            return stacked
        return single
