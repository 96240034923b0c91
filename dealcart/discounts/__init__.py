"""Discount rule engine"""

from .rules import (
    Discount,
    DiscountKind,
    DiscountTarget,
    DiscountValueType,
    CouponTerms,
    BulkTerms,
    PromotionTerms,
)
from .context import CartLine, CustomerRef, OrderContext
from .validator import DiscountValidator
from .calculator import DiscountCalculationResult, calculate, compute_amount
from .engine import DiscountEngine, StackingPolicy
from .summary import OrderSummary, OrderSummaryBuilder

__all__ = [
    "Discount",
    "DiscountKind",
    "DiscountTarget",
    "DiscountValueType",
    "CouponTerms",
    "BulkTerms",
    "PromotionTerms",
    "CartLine",
    "CustomerRef",
    "OrderContext",
    "DiscountValidator",
    "DiscountCalculationResult",
    "calculate",
    "compute_amount",
    "DiscountEngine",
    "StackingPolicy",
    "OrderSummary",
    "OrderSummaryBuilder",
]
