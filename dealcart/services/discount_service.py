"""
Discount service
Coupon validation, discount application and listing for customers
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, List, Optional, Sequence
import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from dealcart.core.config import Settings, settings as default_settings
from dealcart.core.exceptions import (
    CartUnavailableException,
    CustomerNotFoundException,
    InactiveDiscountException,
    InvalidDiscountCodeException,
)
from dealcart.discounts import (
    CustomerRef,
    Discount,
    DiscountCalculationResult,
    DiscountEngine,
    DiscountValidator,
    OrderContext,
    OrderSummary,
    OrderSummaryBuilder,
    StackingPolicy,
    calculate,
)
from dealcart.models import Order, User
from dealcart.models.order import NON_COUNTING_STATUSES
from .cart_service import CartService
from .discount_repository import DiscountRepository

logger = logging.getLogger(__name__)

def utcnow() -> datetime:
    """Naive UTC timestamp, matching stored validity windows"""
    return datetime.now(timezone.utc).replace(tzinfo=None)

@dataclass
class DiscountValidation:
    """Outcome of a single-coupon check"""
    valid: bool
    message: str
    discount: Optional[Discount] = None
    preview: Optional[DiscountCalculationResult] = None

class DiscountService:
    """
    Discount operations exposed to the API

    Builds an order context from the customer and live cart, runs the
    engine and persists usage for discounts that were applied.
    """

    def __init__(
        self,
        db: AsyncSession,
        settings: Settings = default_settings,
        clock: Callable[[], datetime] = utcnow
    ):
        self.db = db
        self.settings = settings
        self.clock = clock
        self.repository = DiscountRepository(db)
        self.cart_service = CartService(db)
        self.validator = DiscountValidator(
            enforce_per_customer_limit=settings.DISCOUNT_ENFORCE_PER_CUSTOMER_LIMIT,
            enforce_first_order_only=settings.DISCOUNT_ENFORCE_FIRST_ORDER_ONLY,
        )
        self.engine = DiscountEngine(
            self.repository,
            self.validator,
            StackingPolicy(settings.DISCOUNT_STACKING_POLICY),
        )
        self.summary_builder = OrderSummaryBuilder()

    async def validate_coupon(
        self,
        coupon_code: str,
        customer_id: uuid.UUID,
        user_id: Optional[uuid.UUID] = None
    ) -> DiscountValidation:
        """
        Check one coupon code for a customer

        Failures carry a fixed message; the specific violated constraint
        is not reported.
        """
        try:
            discount = await self.get_coupon(coupon_code)
        except InvalidDiscountCodeException:
            return DiscountValidation(False, "Invalid coupon code")
        except InactiveDiscountException:
            return DiscountValidation(False, "Coupon is not active")

        customer = await self._get_customer(customer_id)
        if customer is None:
            return DiscountValidation(False, "Invalid customer")

        items = ()
        subtotal = None
        if user_id is not None:
            snapshot = await self.cart_service.get_cart_snapshot(user_id)
            if snapshot is not None:
                items = tuple(snapshot.lines)
                subtotal = snapshot.subtotal

        context = OrderContext(
            customer=await self._customer_ref(customer),
            order_time=self.clock(),
            items=items,
            subtotal=subtotal,
            coupon_codes=(coupon_code,),
        )

        if not self.engine.validate_discount(discount, context):
            return DiscountValidation(False, "Coupon is not applicable")

        return DiscountValidation(
            True,
            "Coupon is valid",
            discount=discount,
            preview=calculate(discount, context),
        )

    async def get_coupon(self, coupon_code: str) -> Discount:
        """
        Look up an active rule by code, first match wins

        Raises:
            InvalidDiscountCodeException: No rule carries the code
            InactiveDiscountException: The matching rule is switched off
        """
        matches = await self.repository.find_by_code(coupon_code)
        if not matches:
            raise InvalidDiscountCodeException(coupon_code)

        discount = matches[0]
        if not discount.is_active:
            raise InactiveDiscountException(discount.name)
        return discount

    async def apply_discounts(
        self,
        customer_id: uuid.UUID,
        user_id: Optional[uuid.UUID] = None,
        coupon_codes: Sequence[str] = (),
        auto_apply: bool = True,
        shipping_cost: Decimal = Decimal("0.00"),
        tax_amount: Decimal = Decimal("0.00")
    ) -> OrderSummary:
        """
        Apply every eligible discount to the customer's cart

        Raises:
            CustomerNotFoundException: Unknown or inactive customer
            CartUnavailableException: Cart missing or empty
        """
        customer = await self._get_customer(customer_id)
        if customer is None:
            raise CustomerNotFoundException(customer_id)

        snapshot = await self.cart_service.get_cart_snapshot(user_id or customer_id)
        if snapshot is None:
            raise CartUnavailableException()

        context = OrderContext(
            customer=await self._customer_ref(customer),
            order_time=self.clock(),
            items=tuple(snapshot.lines),
            subtotal=snapshot.subtotal,
            shipping_cost=shipping_cost,
            tax_amount=tax_amount,
            coupon_codes=tuple(coupon_codes or ()),
            auto_apply=auto_apply,
        )

        # Another request can use up a limit between validation and claim.
        # When every claim of a pass is rejected nothing is held yet, so the
        # engine runs again without the exhausted rules and anything they
        # suppressed gets its turn. Otherwise the rejected results are dropped.
        exhausted = set()
        while True:
            results = await self.engine.apply_discounts(context, exclude=exhausted)
            summary = self.summary_builder.build(context, results)

            rejected = await self._claim_usage(summary, customer.id)
            if not rejected:
                break

            exhausted |= rejected
            if rejected != set(summary.usage_claims):
                results = [r for r in results if r.discount_id not in rejected]
                summary = self.summary_builder.build(context, results)
                break

        logger.info(
            f"Applied {len(summary.applied_discounts)} discount(s) for customer {customer.id}: "
            f"total discount {summary.total_discount}, grand total {summary.grand_total}"
        )
        return summary

    async def get_available_discounts(self, customer_id: uuid.UUID) -> List[Discount]:
        """Active discounts, not filtered by the customer's eligibility"""
        customer = await self._get_customer(customer_id)
        if customer is None:
            raise CustomerNotFoundException(customer_id)

        return await self.repository.find_active_discounts(self.clock())

    async def _claim_usage(self, summary: OrderSummary, customer_id: uuid.UUID) -> set:
        """Claim usage for each applied discount, returning the ids that were rejected"""
        amounts = {r.discount_id: r.discount_amount for r in summary.applied_discounts}
        rejected = set()
        for discount_id in summary.usage_claims:
            claimed = await self.repository.claim_usage(discount_id, customer_id, amounts[discount_id])
            if not claimed:
                rejected.add(discount_id)
        return rejected

    async def _get_customer(self, customer_id: uuid.UUID) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.id == customer_id, User.is_active == True)
        )
        return result.scalar_one_or_none()

    async def _customer_ref(self, customer: User) -> CustomerRef:
        """Customer with the history the validator is configured to check"""
        previous_orders = 0
        usage_counts = {}

        if self.settings.DISCOUNT_ENFORCE_FIRST_ORDER_ONLY:
            result = await self.db.execute(
                select(func.count(Order.id)).where(
                    Order.buyer_id == customer.id,
                    Order.status.not_in(NON_COUNTING_STATUSES)
                )
            )
            previous_orders = result.scalar_one()

        if self.settings.DISCOUNT_ENFORCE_PER_CUSTOMER_LIMIT:
            usage_counts = await self.repository.customer_usage_counts(customer.id)

        return CustomerRef(
            id=customer.id,
            email=customer.email,
            previous_orders=previous_orders,
            usage_counts=usage_counts,
        )
