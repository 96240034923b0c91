"""
Order context
Read-only snapshot of a cart used for one discount evaluation
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping, Optional, Tuple

from dealcart.core.exceptions import InvalidQuantityException

@dataclass(frozen=True)
class CartLine:
    """One cart line as seen by the discount engine"""
    product_id: Any
    name: str
    unit_price: Decimal
    quantity: int
    category_id: Optional[Any] = None

    def __post_init__(self):
        if self.quantity is None or self.quantity <= 0:
            raise InvalidQuantityException(self.product_id, self.quantity)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

@dataclass(frozen=True)
class CustomerRef:
    """
    Customer identity plus an optional history snapshot

    `previous_orders` and `usage_counts` are only consulted when the
    validator is told to enforce first-order-only and per-customer limits.
    """
    id: Any
    email: Optional[str] = None
    previous_orders: int = 0
    usage_counts: Mapping[Any, int] = field(default_factory=dict)

    def uses_of(self, discount_id: Any) -> int:
        return self.usage_counts.get(discount_id, 0)

@dataclass(frozen=True)
class OrderContext:
    """Cart snapshot, constructed fresh per validate/apply call"""
    customer: Optional[CustomerRef]
    order_time: datetime
    items: Tuple[CartLine, ...] = ()
    subtotal: Optional[Decimal] = None
    shipping_cost: Optional[Decimal] = None
    tax_amount: Optional[Decimal] = None
    coupon_codes: Tuple[str, ...] = ()
    auto_apply: bool = True

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items or ()))
        object.__setattr__(self, "coupon_codes", tuple(self.coupon_codes or ()))

    @property
    def coupon_code(self) -> Optional[str]:
        """First code supplied by the caller"""
        return self.coupon_codes[0] if self.coupon_codes else None

    def product_quantity(self, product_id: Any) -> int:
        return sum(item.quantity for item in self.items if item.product_id == product_id)

    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    def cart_total(self) -> Decimal:
        """Subtotal plus shipping and tax, missing parts count as zero"""
        return (
            (self.subtotal or Decimal("0"))
            + (self.shipping_cost or Decimal("0"))
            + (self.tax_amount or Decimal("0"))
        )
