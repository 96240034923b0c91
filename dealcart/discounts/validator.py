"""
Discount validator
Decides whether a rule is applicable to an order context
"""

from typing import Optional
import logging

from .context import CustomerRef, OrderContext
from .rules import BulkTerms, CouponTerms, Discount

logger = logging.getLogger(__name__)

def matched_quantity(discount: Discount, context: OrderContext) -> int:
    """
    Quantity counted towards a bulk threshold

    Scoped to the terms' product when one is set, otherwise every cart line.
    """
    terms = discount.terms
    if isinstance(terms, BulkTerms) and terms.product_id is not None:
        return context.product_quantity(terms.product_id)
    return context.total_quantity()

class DiscountValidator:
    """
    Applicability checks, evaluated in order and stopping at the first failure:
    date range, usage limits, minimum cart value, customer eligibility,
    exclusions, then kind-specific conditions.

    Per-customer limits and first-order-only coupons are accepted without a
    lookup unless the matching enforce flag is set, in which case the
    customer's history snapshot on the context is consulted.
    """

    def __init__(
        self,
        enforce_per_customer_limit: bool = False,
        enforce_first_order_only: bool = False
    ):
        self.enforce_per_customer_limit = enforce_per_customer_limit
        self.enforce_first_order_only = enforce_first_order_only

    def is_valid(self, discount: Discount, context: OrderContext) -> bool:
        checks = (
            self._is_within_date_range,
            self._check_usage_limits,
            self._meets_minimum_cart_value,
            self._is_customer_eligible,
            self._has_no_excluded_items,
            self._check_specific_conditions,
        )
        for check in checks:
            if not check(discount, context):
                logger.debug(f"Discount {discount.id} failed {check.__name__.lstrip('_')}")
                return False
        return True

    def _is_within_date_range(self, discount: Discount, context: OrderContext) -> bool:
        return discount.is_within_window(context.order_time)

    def _check_usage_limits(self, discount: Discount, context: OrderContext) -> bool:
        if discount.max_uses is not None and discount.uses_count >= discount.max_uses:
            return False

        if discount.max_uses_per_customer is not None and self.enforce_per_customer_limit:
            customer = context.customer
            if customer is not None and customer.uses_of(discount.id) >= discount.max_uses_per_customer:
                return False

        return True

    def _meets_minimum_cart_value(self, discount: Discount, context: OrderContext) -> bool:
        if discount.minimum_cart_value is None:
            return True
        if context.subtotal is None:
            return False
        return context.subtotal >= discount.minimum_cart_value

    def _is_customer_eligible(self, discount: Discount, context: OrderContext) -> bool:
        customer: Optional[CustomerRef] = context.customer
        if customer is None:
            return False

        terms = discount.terms
        if isinstance(terms, CouponTerms):
            # Personalised coupons match the email exactly
            if terms.customer_email is not None and terms.customer_email != customer.email:
                return False
            if terms.is_first_order_only and self.enforce_first_order_only:
                return customer.previous_orders == 0

        return True

    def _has_no_excluded_items(self, discount: Discount, context: OrderContext) -> bool:
        for item in context.items:
            if item.product_id in discount.excluded_products:
                return False
            if item.category_id is not None and item.category_id in discount.excluded_categories:
                return False
        return True

    def _check_specific_conditions(self, discount: Discount, context: OrderContext) -> bool:
        if discount.is_bulk:
            return matched_quantity(discount, context) >= discount.terms.minimum_quantity
        return True
