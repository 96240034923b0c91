"""
Shopping cart model
Live cart state the discount service snapshots into an order context
"""

from sqlalchemy import Column, Integer, Numeric, Boolean, ForeignKey, Index, UniqueConstraint, CheckConstraint, Uuid
from sqlalchemy.orm import relationship

from .base import Base, TimestampedModel, UUIDModel

class CartItem(Base, TimestampedModel, UUIDModel):
    """Shopping cart items"""

    __tablename__ = "cart_items"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    product_id = Column(Uuid(as_uuid=True), ForeignKey("products.id"), nullable=False)

    # Quantity and price
    quantity = Column(Integer, nullable=False, default=1)
    price = Column(Numeric(10, 2), nullable=False)  # Price at time of adding

    # Status
    saved_for_later = Column(Boolean, default=False, nullable=False)

    # Relationships
    user = relationship("User", back_populates="cart_items")
    product = relationship("Product", back_populates="cart_items")

    # Constraints
    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="uq_user_product"),
        CheckConstraint("quantity > 0", name="positive_quantity"),
        Index("idx_cart_items_user_saved", "user_id", "saved_for_later"),
    )
