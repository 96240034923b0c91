"""
Discount rule model
A single tagged rule type with kind-specific terms
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, FrozenSet, Optional, Union
import enum

from dealcart.core.exceptions import InvalidDiscountException

class DiscountKind(str, enum.Enum):
    COUPON = "coupon"
    BULK_DISCOUNT = "bulk_discount"
    PROMOTION = "promotion"

class DiscountTarget(str, enum.Enum):
    PRODUCT = "product"
    CATEGORY = "category"
    CART = "cart"
    SHIPPING = "shipping"
    BUY_X_GET_Y = "buy_x_get_y"

class DiscountValueType(str, enum.Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    FIXED_PRICE = "fixed_price"
    FREE_SHIPPING = "free_shipping"

@dataclass(frozen=True)
class CouponTerms:
    """Code-redeemable discount, optionally personalised to one customer"""
    coupon_code: Optional[str] = None
    is_single_use: bool = False
    is_first_order_only: bool = False
    customer_email: Optional[str] = None

@dataclass(frozen=True)
class BulkTerms:
    """Volume threshold, optionally scoped to a single product"""
    minimum_quantity: int = 1
    product_id: Optional[Any] = None

@dataclass(frozen=True)
class PromotionTerms:
    """Marketing rule shown with a banner"""
    auto_apply: bool = False
    banner_text: Optional[str] = None
    image_url: Optional[str] = None

DiscountTerms = Union[CouponTerms, BulkTerms, PromotionTerms]

TERMS_BY_KIND = {
    DiscountKind.COUPON: CouponTerms,
    DiscountKind.BULK_DISCOUNT: BulkTerms,
    DiscountKind.PROMOTION: PromotionTerms,
}

@dataclass(frozen=True)
class Discount:
    """
    Promotional rule affecting cart pricing

    The kind tag selects which terms object is attached; `terms` must be
    an instance of TERMS_BY_KIND[kind].
    """
    id: Any
    name: str
    kind: DiscountKind
    value_type: DiscountValueType
    discount_value: Optional[Decimal]
    terms: DiscountTerms

    code: Optional[str] = None
    description: Optional[str] = None
    target: DiscountTarget = DiscountTarget.CART

    # Validity window, None means unbounded
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    # Usage
    max_uses: Optional[int] = None
    uses_count: int = 0
    max_uses_per_customer: Optional[int] = None

    # Cart gating
    minimum_cart_value: Optional[Decimal] = None
    maximum_discount_amount: Optional[Decimal] = None

    # Flags
    is_active: bool = True
    is_stackable: bool = False
    is_exclusive: bool = False

    # Exclusions
    excluded_products: FrozenSet[Any] = field(default_factory=frozenset)
    excluded_categories: FrozenSet[Any] = field(default_factory=frozenset)

    def __post_init__(self):
        expected = TERMS_BY_KIND[DiscountKind(self.kind)]
        if not isinstance(self.terms, expected):
            raise InvalidDiscountException(
                f"Discount '{self.name}' of kind {self.kind.value} needs {expected.__name__}"
            )

        if self.discount_value is not None and self.discount_value < 0:
            raise InvalidDiscountException(
                f"Discount '{self.name}' has a negative value"
            )

        if self.uses_count < 0:
            raise InvalidDiscountException(
                f"Discount '{self.name}' has a negative usage count"
            )

        if isinstance(self.terms, BulkTerms) and self.terms.minimum_quantity is None:
            raise InvalidDiscountException(
                f"Bulk discount '{self.name}' needs a minimum quantity"
            )

        # Accept any iterable of ids
        object.__setattr__(self, "excluded_products", frozenset(self.excluded_products or ()))
        object.__setattr__(self, "excluded_categories", frozenset(self.excluded_categories or ()))

    @property
    def is_coupon(self) -> bool:
        return self.kind == DiscountKind.COUPON

    @property
    def is_bulk(self) -> bool:
        return self.kind == DiscountKind.BULK_DISCOUNT

    @property
    def is_promotion(self) -> bool:
        return self.kind == DiscountKind.PROMOTION

    def is_within_window(self, moment: datetime) -> bool:
        """Check moment against start/end, each bound optional"""
        if self.start_date is not None and moment < self.start_date:
            return False
        if self.end_date is not None and moment > self.end_date:
            return False
        return True
