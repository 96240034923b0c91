"""Services package"""

from .cart_service import CartService, CartSnapshot
from .discount_repository import DiscountRepository
from .discount_service import DiscountService, DiscountValidation

__all__ = [
    "CartService",
    "CartSnapshot",
    "DiscountRepository",
    "DiscountService",
    "DiscountValidation",
]
