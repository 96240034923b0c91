"""Order model, consulted for first-order-only coupons"""

from sqlalchemy import Column, String, Numeric, Enum, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship
import enum

from .base import Base, TimestampedModel, UUIDModel

class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"

# Statuses that do not count as a previous order
NON_COUNTING_STATUSES = (OrderStatus.CANCELLED,)

class Order(Base, TimestampedModel, UUIDModel):
    """Placed order"""

    __tablename__ = "orders"

    order_number = Column(String(50), unique=True, nullable=False, index=True)
    buyer_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    status = Column(Enum(OrderStatus), default=OrderStatus.PENDING, nullable=False, index=True)

    # Amounts
    subtotal = Column(Numeric(10, 2), nullable=False)
    discount_amount = Column(Numeric(10, 2), default=0)
    total_amount = Column(Numeric(10, 2), nullable=False)

    # Relationships
    buyer = relationship("User", back_populates="orders")

    __table_args__ = (
        Index("idx_orders_buyer_status", "buyer_id", "status"),
    )
