"""
User model
Customers looked up when building an order context
"""

from sqlalchemy import Column, String, Boolean, Enum
from sqlalchemy.orm import relationship
import enum

from .base import Base, TimestampedModel, UUIDModel

class UserRole(str, enum.Enum):
    BUYER = "buyer"
    ADMIN = "admin"

class User(Base, TimestampedModel, UUIDModel):
    """Customer account"""

    __tablename__ = "users"

    email = Column(String(255), unique=True, index=True)
    name = Column(String(100), nullable=False)
    role = Column(Enum(UserRole), default=UserRole.BUYER, nullable=False)

    # Status fields
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    cart_items = relationship("CartItem", back_populates="user", cascade="all, delete-orphan")
    orders = relationship("Order", back_populates="buyer")

    def __repr__(self):
        return f"<User(id={self.id!r}, email={self.email!r})>"
