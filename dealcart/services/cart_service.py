"""
Cart service layer
Snapshots live cart state for discount evaluation
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from dealcart.discounts.context import CartLine
from dealcart.models import CartItem

@dataclass
class CartSnapshot:
    """Active cart lines with their subtotal"""
    lines: List[CartLine]
    subtotal: Decimal

class CartService:
    """Shopping cart service"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_cart_snapshot(self, user_id: uuid.UUID) -> Optional[CartSnapshot]:
        """
        Build a snapshot of the user's cart

        Saved-for-later items are left out. Category ids come from the
        product catalog.

        Returns:
            None when the cart has no active items
        """
        result = await self.db.execute(
            select(CartItem)
            .options(selectinload(CartItem.product))
            .where(
                CartItem.user_id == user_id,
                CartItem.saved_for_later == False
            )
            .order_by(CartItem.created_at, CartItem.id)
        )
        cart_items = result.scalars().all()

        if not cart_items:
            return None

        lines = [
            CartLine(
                product_id=item.product_id,
                name=item.product.name,
                unit_price=item.price,
                quantity=item.quantity,
                category_id=item.product.category_id,
            )
            for item in cart_items
        ]
        subtotal = sum((line.line_total for line in lines), Decimal("0.00"))

        return CartSnapshot(lines=lines, subtotal=subtotal)
