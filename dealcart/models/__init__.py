"""Models package initialization"""

from .base import Base
from .user import User, UserRole
from .catalog import Category, Product
from .cart import CartItem
from .order import Order, OrderStatus
from .discount import DiscountRecord, DiscountUsage

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Category",
    "Product",
    "CartItem",
    "Order",
    "OrderStatus",
    "DiscountRecord",
    "DiscountUsage",
]
